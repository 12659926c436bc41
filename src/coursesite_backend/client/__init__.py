from .push_client import PushServer, PushServerError, PushNotificationSink, get_push_server, get_optional_push_server, get_notification_sink
