"""
MyAnimeList API v2 endpoint definitions.

Paths are relative to the API base URL and may contain ``{placeholders}``.

Documentation: https://myanimelist.net/apiconfig/references/api/v2
"""

# User endpoints
USER_INFO = "users/{user_name}"
USER_ANIME_LIST = "users/{user_name}/animelist"
USER_MANGA_LIST = "users/{user_name}/mangalist"

# Anime endpoints
ANIME_SEARCH = "anime"
ANIME_DETAILS = "anime/{anime_id}"
ANIME_MY_LIST_STATUS = "anime/{anime_id}/my_list_status"

# Anime list statuses and sort orders accepted by USER_ANIME_LIST
ANIME_LIST_STATUSES = ("watching", "completed", "on_hold", "dropped", "plan_to_watch")
ANIME_LIST_SORTS = ("list_score", "list_updated_at", "anime_title", "anime_start_date")
