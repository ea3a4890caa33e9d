"""Supported languages and their Edge TTS voices."""

LANGUAGES = {
    "en": {"name": "English", "voices": ["en-US-AriaNeural", "en-GB-SoniaNeural", "en-US-GuyNeural"]},
    "es": {"name": "Spanish", "voices": ["es-ES-ElviraNeural", "es-MX-DaliaNeural"]},
    "fr": {"name": "French", "voices": ["fr-FR-DeniseNeural", "fr-FR-HenriNeural"]},
    "de": {"name": "German", "voices": ["de-DE-ConradNeural", "de-DE-KatjaNeural", "de-DE-AmalaNeural"]},
    "it": {"name": "Italian", "voices": ["it-IT-ElsaNeural", "it-IT-DiegoNeural"]},
    "pt": {"name": "Portuguese", "voices": ["pt-BR-FranciscaNeural", "pt-PT-RaquelNeural"]},
    "ru": {"name": "Russian", "voices": ["ru-RU-SvetlanaNeural", "ru-RU-DmitryNeural"]},
    "ja": {"name": "Japanese", "voices": ["ja-JP-NanamiNeural", "ja-JP-KeitaNeural"]},
    "ko": {"name": "Korean", "voices": ["ko-KR-SunHiNeural", "ko-KR-InJoonNeural"]},
    "zh": {"name": "Chinese (Mandarin)", "voices": ["zh-CN-XiaoxiaoNeural", "zh-CN-YunxiNeural"]},
    "ar": {"name": "Arabic", "voices": ["ar-SA-ZariyahNeural", "ar-SA-HamedNeural"]},
    "hi": {"name": "Hindi", "voices": ["hi-IN-SwaraNeural", "hi-IN-MadhurNeural"]},
    "nl": {"name": "Dutch", "voices": ["nl-NL-ColetteNeural", "nl-NL-MaartenNeural"]},
    "sv": {"name": "Swedish", "voices": ["sv-SE-SofieNeural", "sv-SE-MattiasNeural"]},
    "no": {"name": "Norwegian", "voices": ["nb-NO-PernilleNeural", "nb-NO-FinnNeural"]},
    "da": {"name": "Danish", "voices": ["da-DK-ChristelNeural", "da-DK-JeppeNeural"]},
    "fi": {"name": "Finnish", "voices": ["fi-FI-NooraNeural", "fi-FI-HarriNeural"]},
    "pl": {"name": "Polish", "voices": ["pl-PL-ZofiaNeural", "pl-PL-MarekNeural"]},
    "tr": {"name": "Turkish", "voices": ["tr-TR-EmelNeural", "tr-TR-AhmetNeural"]},
    "he": {"name": "Hebrew", "voices": ["he-IL-HilaNeural", "he-IL-AvriNeural"]},
}

# Used when a language code has no voice list of its own
FALLBACK_VOICE = "en-US-AriaNeural"


def language_name(code: str) -> str:
    """Display name for a language code, or the code itself when unknown."""
    entry = LANGUAGES.get(code)
    return entry["name"] if entry else code


def voices_for(code: str) -> list:
    """Edge TTS voices for a language code."""
    entry = LANGUAGES.get(code)
    if entry and entry["voices"]:
        return list(entry["voices"])
    return [FALLBACK_VOICE]
