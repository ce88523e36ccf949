"""Photos API router.

Filters arrive as ordinary query parameters (repeated keys for multi-valued
dimensions), exactly as they appear in a shared URL.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.dependencies import SessionFactory, get_session_factory
from api.models.schemas import NotificationModel, PaginationInfo, PhotosResponse
from config.logging_config import get_logger
from src.filters.url_codec import encode
from src.session import ResultsStatus

logger = get_logger("api.photos")

router = APIRouter()


@router.get("/photos", response_model=PhotosResponse)
async def list_photos(
    request: Request,
    track: bool = Query(True, description="Record this filter change in history and analytics"),
    factory: SessionFactory = Depends(get_session_factory),
):
    """
    Get a page of photos for the filters in the query string.

    Known-incompatible filters are cleared before querying; the response
    reports which ones and why. `sort` and `page` fall back to their
    defaults when invalid.
    """
    session = factory(track=track)
    cleared: list[str] = []
    session.guard.add_listener(lambda event: cleared.extend(d.key for d in event.cleared_dimensions))

    try:
        session.load_from_url(request.query_params)
        outcome = await session.load_results()
    finally:
        session.close()

    if outcome.status == ResultsStatus.FAILED:
        raise HTTPException(
            status_code=503,
            detail={"message": "Photo catalog is temporarily unavailable", "retryable": outcome.retryable},
        )

    page = outcome.page
    return PhotosResponse(
        photos=list(page.items),
        pagination=PaginationInfo(
            page=page.page,
            page_size=page.page_size,
            total=page.total,
            total_pages=page.total_pages,
            has_next=page.has_next,
        ),
        filters=outcome.state.to_dict(),
        description=outcome.state.describe(),
        sort=session.sort.value,
        query=encode(outcome.state),
        share_url=session.share_url(),
        cleared=cleared,
        notifications=[NotificationModel(**n.to_dict()) for n in session.notifications.active()],
    )
