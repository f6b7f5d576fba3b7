"""Static language tables shared by the dubbing and playback services."""

from __future__ import annotations

from typing import Dict, Tuple

ORIGIN_LANGUAGE = "origin"
UNKNOWN_LANGUAGE = "und"

# Target languages accepted by the remote dubbing service.
DUBBING_LANGUAGE_CODES: Tuple[str, ...] = (
    "ar",
    "bg",
    "cs",
    "da",
    "de",
    "el",
    "en",
    "es",
    "fi",
    "fr",
    "he",
    "hi",
    "hu",
    "id",
    "it",
    "ja",
    "ko",
    "ms",
    "nl",
    "no",
    "pl",
    "pt",
    "ro",
    "ru",
    "sk",
    "sv",
    "th",
    "tr",
    "uk",
    "vi",
    "zh",
    "fil",
)

# Lower-cased token -> canonical code. Keys never collide with canonical values.
LANGUAGE_ALIASES: Dict[str, str] = {
    # ISO 639-2 (terminological and bibliographic) forms
    "ara": "ar",
    "bul": "bg",
    "ces": "cs",
    "cze": "cs",
    "dan": "da",
    "deu": "de",
    "ger": "de",
    "ell": "el",
    "gre": "el",
    "eng": "en",
    "spa": "es",
    "fin": "fi",
    "fra": "fr",
    "fre": "fr",
    "heb": "he",
    "hin": "hi",
    "hun": "hu",
    "ind": "id",
    "ita": "it",
    "jpn": "ja",
    "kor": "ko",
    "msa": "ms",
    "may": "ms",
    "nld": "nl",
    "dut": "nl",
    "nor": "no",
    "nob": "no",
    "nno": "no",
    "pol": "pl",
    "por": "pt",
    "ron": "ro",
    "rum": "ro",
    "rus": "ru",
    "slk": "sk",
    "slo": "sk",
    "swe": "sv",
    "tha": "th",
    "tur": "tr",
    "ukr": "uk",
    "vie": "vi",
    "zho": "zh",
    "chi": "zh",
    "cmn": "zh",
    "tgl": "fil",
    # Legacy and vendor-specific two-letter forms
    "jp": "ja",
    "iw": "he",
    "in": "id",
    "nb": "no",
    "nn": "no",
    "tl": "fil",
    "kr": "ko",
    "cn": "zh",
    # Region-tagged forms whose primary subtag is not the canonical code
    # or which players commonly emit verbatim
    "ja-jp": "ja",
    "zh-cn": "zh",
    "zh-tw": "zh",
    "zh-hk": "zh",
    "zh-hans": "zh",
    "zh-hant": "zh",
    "en-us": "en",
    "en-gb": "en",
    "ko-kr": "ko",
    "fr-fr": "fr",
    "fr-ca": "fr",
    "es-es": "es",
    "es-419": "es",
    "es-mx": "es",
    "pt-br": "pt",
    "pt-pt": "pt",
    "de-de": "de",
    "nb-no": "no",
    "nn-no": "no",
    "fil-ph": "fil",
    "tl-ph": "fil",
    # English names, as some manifests put them in the LANGUAGE attribute
    "arabic": "ar",
    "bulgarian": "bg",
    "czech": "cs",
    "danish": "da",
    "german": "de",
    "greek": "el",
    "english": "en",
    "spanish": "es",
    "finnish": "fi",
    "french": "fr",
    "hebrew": "he",
    "hindi": "hi",
    "hungarian": "hu",
    "indonesian": "id",
    "italian": "it",
    "japanese": "ja",
    "korean": "ko",
    "malay": "ms",
    "dutch": "nl",
    "norwegian": "no",
    "polish": "pl",
    "portuguese": "pt",
    "romanian": "ro",
    "russian": "ru",
    "slovak": "sk",
    "swedish": "sv",
    "thai": "th",
    "turkish": "tr",
    "ukrainian": "uk",
    "vietnamese": "vi",
    "chinese": "zh",
    "mandarin": "zh",
    "filipino": "fil",
    "tagalog": "fil",
    "original": ORIGIN_LANGUAGE,
}

LANGUAGE_LABELS: Dict[str, str] = {
    ORIGIN_LANGUAGE: "ORIGIN",
    "ko": "한국어",
    "en": "영어",
    "ja": "일본어",
    "zh": "중국어",
    "es": "스페인어",
    "fr": "프랑스어",
    "de": "독일어",
    "ru": "러시아어",
    "pt": "포르투갈어",
    "it": "이탈리아어",
    "ar": "아랍어",
    "hi": "힌디어",
    "th": "태국어",
    "vi": "베트남어",
    "id": "인도네시아어",
    "bg": "불가리아어",
    "cs": "체코어",
    "da": "덴마크어",
    "el": "그리스어",
    "fi": "핀란드어",
    "he": "히브리어",
    "hu": "헝가리어",
    "ms": "말레이어",
    "nl": "네덜란드어",
    "no": "노르웨이어",
    "pl": "폴란드어",
    "ro": "루마니아어",
    "sk": "슬로바키아어",
    "sv": "스웨덴어",
    "tr": "터키어",
    "uk": "우크라이나어",
    "fil": "필리핀어",
}


__all__ = [
    "DUBBING_LANGUAGE_CODES",
    "LANGUAGE_ALIASES",
    "LANGUAGE_LABELS",
    "ORIGIN_LANGUAGE",
    "UNKNOWN_LANGUAGE",
]
