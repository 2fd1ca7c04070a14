"""
Error reporting for the event handlers.

Raw failures are written as error-reporting events to an ``errors`` log
stream so operators see stack traces with the affected account, while end
users only ever see :func:`user_facing_message`.
"""
import traceback
from typing import Any, Dict, Mapping, Optional, Protocol

from fireshop.logs import get_logger

GENERIC_MESSAGE = "An error occurred, developers have been alerted"
ERROR_EVENT_TYPE = "type.googleapis.com/google.devtools.clouderrorreporting.v1beta1.ReportedErrorEvent"


def _error_type(error: BaseException) -> Optional[str]:
    kind = getattr(error, "type", None)
    if kind:
        return kind
    kind = getattr(getattr(error, "error", None), "type", None)
    if kind:
        return kind
    body = getattr(error, "json_body", None)
    if isinstance(body, Mapping) and isinstance(body.get("error"), Mapping):
        return body["error"].get("type")
    return None


def _error_message(error: BaseException) -> str:
    message = getattr(error, "user_message", None)
    if message:
        return message
    body = getattr(error, "json_body", None)
    if isinstance(body, Mapping) and isinstance(body.get("error"), Mapping):
        message = body["error"].get("message")
    return message or str(error)


def user_facing_message(error: BaseException) -> str:
    """Return a message safe to show to the customer.

    Errors tagged with a Stripe error type (``card_error`` and friends) carry
    messages written for end users. Everything else is replaced by
    :data:`GENERIC_MESSAGE`.
    """
    if _error_type(error):
        return _error_message(error)
    return GENERIC_MESSAGE


class Sink(Protocol):
    def write(self, entry: Dict[str, Any]) -> None:
        ...


class LogSink:
    """Writes error events to the ``errors`` structured log stream."""

    def __init__(self, log_name: str = "errors"):
        self.log_name = log_name
        self._logger = get_logger(log_name)

    def write(self, entry: Dict[str, Any]) -> None:
        self._logger.error(entry["message"], **{k: v for k, v in entry.items() if k != "message"})


class ErrorReporter:
    """
    Forwards unexpected failures to a sink.

    Args:
        sink: Destination for error events
        service: Default service name, the running function's identity
    """

    def __init__(self, sink: Sink, service: str):
        self.sink = sink
        self.service = service

    def build_entry(
        self,
        error: BaseException,
        context: Optional[Mapping[str, Any]] = None,
        service: Optional[str] = None,
    ) -> Dict[str, Any]:
        name = service or self.service
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return {
            "@type": ERROR_EVENT_TYPE,
            "message": stack,
            "serviceContext": {"service": name, "resourceType": "cloud_function"},
            "context": dict(context or {}),
            "resource": {"type": "cloud_function", "labels": {"function_name": name}},
        }

    def report(
        self,
        error: BaseException,
        context: Optional[Mapping[str, Any]] = None,
        service: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Write ``error`` to the sink.

        Sink failures propagate to the caller so the invocation fails and the
        platform may redeliver the event.

        Returns:
            The entry that was written
        """
        entry = self.build_entry(error, context, service)
        self.sink.write(entry)
        return entry
