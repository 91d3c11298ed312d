from .idea_service import create_idea, get_idea_by_number, list_ideas, update_idea, upvote_idea
from .idea_views import compose_list_view, filter_ideas, group_by_validation_status, sort_ideas
from .record_store import RecordStore
from .upvote_overrides import UpvoteOverrides

__all__ = [
    "create_idea",
    "get_idea_by_number",
    "list_ideas",
    "update_idea",
    "upvote_idea",
    "compose_list_view",
    "filter_ideas",
    "group_by_validation_status",
    "sort_ideas",
    "RecordStore",
    "UpvoteOverrides",
]
