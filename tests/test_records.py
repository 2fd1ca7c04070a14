import pytest
from pydantic import ValidationError

from fireshop.records import Account, ChargeRequest, RecordStatus, SourceRecord, status_of


@pytest.mark.parametrize("value, expected", [
    (None, None),
    ({"amount": 500}, RecordStatus.PENDING),
    ({"amount": 500, "id": "ch_1"}, RecordStatus.SUCCEEDED),
    ({"amount": 500, "error": "Your card was declined."}, RecordStatus.FAILED),
    ("tok_visa", RecordStatus.PENDING),
])
def test_status_of(value, expected):
    assert status_of(value) is expected


def test_charge_request_keeps_extra_fields():
    request = ChargeRequest.model_validate({"amount": 500, "description": "Order o1"})
    assert request.source is None
    assert request.status is RecordStatus.PENDING
    assert request.model_dump()["description"] == "Order o1"


def test_charge_request_rejects_non_positive_amounts():
    with pytest.raises(ValidationError):
        ChargeRequest.model_validate({"amount": 0})
    with pytest.raises(ValidationError):
        ChargeRequest.model_validate({"source": "card_1"})


def test_source_record_status():
    assert SourceRecord(token="tok_visa").status is RecordStatus.PENDING
    assert SourceRecord(token="tok_visa", error="declined").status is RecordStatus.FAILED
    assert SourceRecord(id="card_1").status is RecordStatus.SUCCEEDED


def test_account_requires_uid():
    with pytest.raises(ValidationError):
        Account(uid="")
