import os
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

DEFAULT_FX_RATE = float(os.environ.get("DEFAULT_FX_RATE", 17.5))  # local currency per USD
LOCAL_CURRENCY = os.environ.get("LOCAL_CURRENCY", "MXN")

# IC rubric overrides
IC_MIN_NET_FEES_USD = float(os.environ.get("IC_MIN_NET_FEES_USD", 120000))
IC_GO_SCORE = int(os.environ.get("IC_GO_SCORE", 72))
IC_NO_GO_SCORE = int(os.environ.get("IC_NO_GO_SCORE", 55))

IC_BATCH_WORKERS = int(os.environ.get("IC_BATCH_WORKERS", 4))
