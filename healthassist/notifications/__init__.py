from healthassist.notifications.email_notifier import EmailNotifier, NotificationKind, SmtpMailer

__all__ = ["EmailNotifier", "NotificationKind", "SmtpMailer"]
