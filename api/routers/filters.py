"""Filter counts API router."""

from fastapi import APIRouter, Depends, Request

from api.dependencies import SessionFactory, get_session_factory
from api.models.schemas import FilterCountsResponse

router = APIRouter()


@router.get("/filter-counts", response_model=FilterCountsResponse)
async def get_filter_counts(
    request: Request,
    factory: SessionFactory = Depends(get_session_factory),
):
    """
    Get per-value counts for every dimension.

    Each dimension's counts are scoped to the other active filters, so a
    count answers "how many photos if I also pick this value".
    """
    session = factory(track=False)
    try:
        state = session.load_from_url(request.query_params)
        counts = await session.load_counts()
        options = session.guard.option_states(state, counts)
    finally:
        session.close()

    return FilterCountsResponse(
        filters=state.to_dict(),
        counts=counts.to_dict() if counts is not None else {},
        options={
            dimension.key: {value: pill.value for value, pill in pills.items()}
            for dimension, pills in options.items()
        },
    )
