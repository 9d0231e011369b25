"""Simple two-language (ko/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ko": "우리의 궤도",
        "en": "Orbit Moments",
    },
    "btn_prev_day": {
        "ko": "‹",
        "en": "‹",
    },
    "btn_next_day": {
        "ko": "›",
        "en": "›",
    },
    "btn_prev_poi": {
        "ko": "•‹",
        "en": "•‹",
    },
    "btn_next_poi": {
        "ko": "›•",
        "en": "›•",
    },
    "help_prev_poi": {
        "ko": "이전 순간",
        "en": "Previous moment",
    },
    "help_next_poi": {
        "ko": "다음 순간",
        "en": "Next moment",
    },
    "help_prev_year": {
        "ko": "이전 해",
        "en": "Previous year",
    },
    "help_next_year": {
        "ko": "다음 해",
        "en": "Next year",
    },
    "btn_create": {
        "ko": "＋ 추가",
        "en": "＋ Create",
    },
    "btn_today": {
        "ko": "오늘",
        "en": "Today",
    },
    "btn_edit": {
        "ko": "수정",
        "en": "Edit",
    },
    "btn_save": {
        "ko": "저장",
        "en": "Save",
    },
    "btn_delete": {
        "ko": "삭제",
        "en": "Delete",
    },
    "btn_cancel": {
        "ko": "취소",
        "en": "Cancel",
    },
    "label_title": {
        "ko": "제목",
        "en": "Title",
    },
    "label_date": {
        "ko": "날짜",
        "en": "Date",
    },
    "label_description": {
        "ko": "설명",
        "en": "Description",
    },
    "label_photos": {
        "ko": "사진",
        "en": "Photos",
    },
    "label_moments": {
        "ko": "이 해의 순간들",
        "en": "Moments this year",
    },
    "hint_svg_select": {
        "ko": "마커에 마우스를 올리면 순간을 볼 수 있어요. 선택은 아래 '이 해의 순간들'에서 할 수 있어요.",
        "en": "Hover a marker to preview a moment; pick it under 'Moments this year' below.",
    },
    "toast_saved": {
        "ko": "순간을 저장했어요 ✨",
        "en": "Saved moment ✨",
    },
    "toast_deleted": {
        "ko": "순간을 삭제했어요",
        "en": "Deleted moment",
    },
    "toast_save_failed": {
        "ko": "저장하지 못했어요",
        "en": "Save failed",
    },
    "toast_delete_failed": {
        "ko": "삭제하지 못했어요",
        "en": "Delete failed",
    },
    "toast_upload_failed": {
        "ko": "사진을 올리지 못했어요",
        "en": "Upload failed",
    },
    "error_title_required": {
        "ko": "제목을 입력해 주세요",
        "en": "Title is required",
    },
    "warn_orbit_unavailable": {
        "ko": "궤도 데이터를 불러오지 못했어요. 날짜 탐색은 계속 쓸 수 있어요.",
        "en": "Orbit data is unavailable. Date navigation still works.",
    },
    "warn_pois_unavailable": {
        "ko": "순간들을 불러오지 못했어요.",
        "en": "Moments could not be loaded.",
    },
    "year_cutoff": {
        "ko": "곧 해가 바뀌어요",
        "en": "Year boundary approaching",
    },
    "photo_count": {
        "ko": "사진 {n}장",
        "en": "{n} photos",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
