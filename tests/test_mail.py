from fireshop.mail import Mailer


def test_send_logs_in_and_sends_html(mocker):
    smtp = mocker.patch("fireshop.mail.smtplib.SMTP_SSL")
    server = smtp.return_value.__enter__.return_value
    mailer = Mailer("smtp.gmail.com", 465, "shop@gmail.com", "app-password", '"FireShop" <noreply@firebase.com>')

    mailer.send("ada@example.com", "Order Confirmation", "<h2>FireShop</h2>")

    smtp.assert_called_once_with("smtp.gmail.com", 465)
    server.login.assert_called_once_with("shop@gmail.com", "app-password")
    message = server.send_message.call_args[0][0]
    assert message["To"] == "ada@example.com"
    assert message["From"] == '"FireShop" <noreply@firebase.com>'
    assert message["Subject"] == "Order Confirmation"
    assert message.get_payload()[0].get_content_type() == "text/html"
