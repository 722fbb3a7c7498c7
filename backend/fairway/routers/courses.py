import logging

from fastapi import APIRouter, Depends

from ..cache import course_holes_cache
from ..schemas import CourseHolesIn, CourseHolesOut, HoleOut
from ..scoring.matrix import HoleTemplate
from ..store import QueryClient, Row, get_store
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


def _holes_out(template: HoleTemplate) -> CourseHolesOut:
    return CourseHolesOut(
        course_name=template.course_name,
        has_par=template.has_par,
        total_par=template.total_par,
        holes=[
            HoleOut(
                number=hole.number,
                par=hole.par,
                yardage=hole.yardage,
                handicap=hole.handicap,
            )
            for hole in template.holes
        ],
    )


@router.get("/{course_name}/holes", response_model=CourseHolesOut)
async def get_course_holes(
    course_name: str, client: QueryClient = Depends(get_store)
):
    rows = await client.select(
        "course_holes", {"course_name": course_name}, order=["hole_number"]
    )
    return _holes_out(HoleTemplate.from_rows(course_name, rows))


@router.put("/{course_name}/holes", response_model=CourseHolesOut)
async def replace_course_holes(
    course_name: str,
    body: CourseHolesIn,
    client: QueryClient = Depends(get_store),
    user: Row = Depends(get_current_user),
):
    try:
        rows = await client.replace(
            "course_holes",
            {"course_name": course_name},
            [{**hole.model_dump(), "course_name": course_name} for hole in body.holes],
        )
    finally:
        await course_holes_cache.invalidate(course_name)
    logger.info(
        "User %s replaced %d holes of course %r", user["id"], len(rows), course_name
    )
    return _holes_out(HoleTemplate.from_rows(course_name, rows))
