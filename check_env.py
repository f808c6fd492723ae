from app.settings import settings, mask_secret
print("API key :", mask_secret(settings.GEMINI_API_KEY))
print("BASE URL:", settings.GEMINI_BASE_URL)
print("MODEL   :", settings.GEMINI_MODEL)
print("ON FAIL :", settings.UPSTREAM_FAILURE_STATUS)
