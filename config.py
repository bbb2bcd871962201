import os
from dotenv import load_dotenv

load_dotenv()

GEMINI_OPENAI_BASE = "https://generativelanguage.googleapis.com/v1beta/openai/"


class DefaultConfig:
    """ Bot Configuration """

    PORT = int(os.environ.get("PORT", "3000"))
    HOST = "0.0.0.0"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # === Bot Framework ===
    APP_ID = os.environ.get("MICROSOFT_APP_ID", "")
    APP_PASSWORD = os.environ.get("MICROSOFT_APP_PASSWORD", "")
    APP_TYPE = os.environ.get("MICROSOFT_APP_TYPE", "")
    APP_TENANTID = os.environ.get("MICROSOFT_APP_TENANT_ID", "")

    # === Gemini (OpenAI-compatible endpoint) ===
    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
    GEMINI_API_BASE = os.environ.get("GEMINI_API_BASE") or GEMINI_OPENAI_BASE
    MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
    MAX_TOKENS = 500
    TEMPERATURE = 0.7

    # === Limits ===
    MAX_HISTORY = 4
    CACHE_TTL_SECONDS = 5 * 60
    CACHE_SWEEP_SECONDS = 10 * 60
    MAX_MESSAGE_LENGTH = 500
    MAX_REQUESTS = 1000
    MAX_REPLY_LENGTH = 4000


CONFIG = DefaultConfig()
