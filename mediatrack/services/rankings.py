"""
Rating rankings built from users' personal library ratings.

Media are ordered by the mean of every non-null UserMedia.rating. Ties keep
whatever order the grouping query returned.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediatrack.models.library_model import UserMedia
from mediatrack.models.media_model import Media, MediaType
from mediatrack.schemas.media_schemas import MediaOut, RankedMediaOut
from mediatrack.services.media_service import media_query

TOP_LIMIT = 10


async def rating_averages(session: AsyncSession) -> List[Tuple[int, float, int]]:
    """(media_id, average, count) sorted by average, highest first."""
    average = func.avg(UserMedia.rating).label("average")
    stmt = (
        select(UserMedia.media_id, average, func.count(UserMedia.rating))
        .where(UserMedia.rating.is_not(None))
        .group_by(UserMedia.media_id)
        .order_by(average.desc())
    )
    rows = (await session.execute(stmt)).all()
    ranked = [(media_id, float(avg), int(count)) for media_id, avg, count in rows]
    # sorted() is stable, so equal averages keep the grouping order
    return sorted(ranked, key=lambda r: r[1], reverse=True)


async def ranked_media(
    session: AsyncSession, media_type: Optional[MediaType] = None, limit: Optional[int] = None
) -> List[dict]:
    averages = await rating_averages(session)
    if not averages:
        return []

    stmt = media_query().where(Media.id.in_([media_id for media_id, _, _ in averages]))
    if media_type is not None:
        stmt = stmt.where(Media.type == media_type.value)
    by_id = {m.id: m for m in (await session.execute(stmt)).scalars().all()}

    ranked = []
    for media_id, avg, count in averages:
        media = by_id.get(media_id)
        if media is None:
            continue
        ranked.append({"media": media, "average_rating": round(avg, 2), "rating_count": count})
        if limit is not None and len(ranked) >= limit:
            break
    return ranked


async def top_media(session: AsyncSession, media_type: MediaType) -> dict:
    ranked = await ranked_media(session, media_type, limit=TOP_LIMIT)
    label = "MOVIES" if media_type is MediaType.MOVIE else "SERIES"
    return {
        "category": label,
        "count": len(ranked),
        "top10": [item["media"] for item in ranked],
    }


async def global_ranking(session: AsyncSession) -> dict:
    ranked = await ranked_media(session)
    data = [
        RankedMediaOut(
            **MediaOut.model_validate(item["media"]).model_dump(),
            average_rating=item["average_rating"],
            rating_count=item["rating_count"],
        )
        for item in ranked
    ]
    return {"total": len(data), "data": data}
