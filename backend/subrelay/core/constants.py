DEFAULT_LABEL = "𝙑𝙋𝙉 𝙉𝙀𝙓𝙕𝙊"
DEFAULT_SUBSCRIPTION_NAME = "MySubscription"
