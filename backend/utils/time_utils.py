import os
from datetime import datetime

import pytz

APP_TIMEZONE = pytz.timezone(os.getenv("APP_TIMEZONE", "America/Sao_Paulo"))


def now_local() -> datetime:
    """Timezone-aware 'now' in the business timezone."""
    return datetime.now(APP_TIMEZONE)
