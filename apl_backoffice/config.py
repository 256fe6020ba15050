import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./apl_backoffice.db")

# Redis (cache + notification queue). Both are optional: without Redis the
# cache stays in process memory and notifications are sent inline.
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"
NOTIFICATION_QUEUE_ENABLED = os.getenv("NOTIFICATION_QUEUE_ENABLED", "true").lower() != "false"

# Resend Email Configuration (SMTP is used when no API key is set)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "APL Laboratorio <noreply@apl.com.uy>")
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")

# WhatsApp Cloud API
WHATSAPP_TOKEN = os.getenv("WHATSAPP_TOKEN")
WHATSAPP_PHONE_NUMBER_ID = os.getenv("WHATSAPP_PHONE_NUMBER_ID")
WHATSAPP_API_VERSION = os.getenv("WHATSAPP_API_VERSION", "v19.0")

# Where reminder notifications are delivered (laboratory staff inbox / phone)
REMINDER_NOTIFY_EMAIL = os.getenv("REMINDER_NOTIFY_EMAIL")
REMINDER_NOTIFY_WHATSAPP = os.getenv("REMINDER_NOTIFY_WHATSAPP")

# In-process scheduler
SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE", "America/Montevideo")
REMINDER_CHECK_CRON = os.getenv("REMINDER_CHECK_CRON", "0 * * * *")  # hourly
REMINDER_GENERATION_CRON = os.getenv("REMINDER_GENERATION_CRON", "0 8 * * *")  # daily 08:00
REMINDER_OVERDUE_CRON = os.getenv("REMINDER_OVERDUE_CRON", "0 */6 * * *")  # every 6 hours

# Reminder statistics cache TTL (seconds)
REMINDER_STATS_CACHE_TTL = int(os.getenv("REMINDER_STATS_CACHE_TTL", "60"))
