import logging

from fastapi import APIRouter, Depends

from ..exceptions import http_problem
from ..schemas import (
    AdjustStrokesIn,
    EventRoundOut,
    HoleEditIn,
    HoleOut,
    PlayerScoresOut,
    ScoreMutationsIn,
    ScorecardOut,
    ScorecardSaveIn,
    ScorecardSaveOut,
    SkillsContestOut,
)
from ..scoring.matrix import AdjustStrokes, ScoreMatrix, SetStrokes, UnknownScoreTarget
from ..services import scorecards as scorecard_service
from ..services.clubhouse import ScoreWriter
from ..services.scorecards import SaveResult
from ..store import QueryClient, Row, get_store
from .clubhouse import require_score_writer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clubhouse", tags=["scorecards"])


def _unknown_target(exc: UnknownScoreTarget):
    return http_problem(status_code=404, detail=str(exc), code="score_target_not_found")


def _invalid_scores(exc: ValueError):
    return http_problem(status_code=422, detail=str(exc), code="scorecard_invalid")


def scorecard_out(
    event_id: str,
    round_row: Row,
    matrix: ScoreMatrix,
    contests: list[Row],
    writer: ScoreWriter | None = None,
) -> ScorecardOut:
    template = matrix.template
    return ScorecardOut(
        event_id=event_id,
        round=EventRoundOut(
            id=round_row["id"],
            course_name=round_row["course_name"],
            round_date=round_row.get("round_date"),
            tee_time=round_row.get("tee_time"),
            scoring_type=round_row["scoring_type"],
            holes=round_row["holes"],
            round_number=round_row["round_number"],
        ),
        course_name=template.course_name,
        has_par=template.has_par,
        total_par=template.total_par,
        holes=[
            HoleOut(number=h.number, par=h.par, yardage=h.yardage, handicap=h.handicap)
            for h in template.holes
        ],
        players=[
            PlayerScoresOut(
                player_id=row.player_id,
                name=row.name,
                strokes=list(row.strokes),
                versions=list(row.versions),
                total_strokes=row.total_strokes,
                total_par=row.total_par,
                differential=row.differential,
                display=row.display,
            )
            for row in matrix.players
        ],
        contests=[
            SkillsContestOut(
                id=c["id"],
                round_id=c["round_id"],
                hole=c["hole"],
                contest_type=c["contest_type"],
                winner_id=c.get("winner_id"),
            )
            for c in contests
        ],
        writer=writer.display_name if writer else None,
    )


async def _current_scorecard(
    client: QueryClient, writer: ScoreWriter, round_id: str
) -> ScorecardOut:
    round_row, matrix = await scorecard_service.load_scorecard(
        client, writer.event_id, round_id
    )
    contests = await scorecard_service.load_round_contests(
        client, writer.event_id, round_id
    )
    return scorecard_out(writer.event_id, round_row, matrix, contests, writer)


async def _saved(
    client: QueryClient, writer: ScoreWriter, round_id: str, result: SaveResult
) -> ScorecardSaveOut:
    logger.info(
        "%s scorer %r saved round %s (%d updated, %d inserted)",
        writer.kind,
        writer.display_name,
        round_id,
        result.updated,
        result.inserted,
    )
    return ScorecardSaveOut(
        updated=result.updated,
        inserted=result.inserted,
        scorecard=await _current_scorecard(client, writer, round_id),
    )


@router.get("/{slug}/scorecards/{round_id}", response_model=ScorecardOut)
async def get_scorecard(
    round_id: str,
    client: QueryClient = Depends(get_store),
    writer: ScoreWriter = Depends(require_score_writer),
):
    return await _current_scorecard(client, writer, round_id)


@router.put("/{slug}/scorecards/{round_id}", response_model=ScorecardSaveOut)
async def save_scorecard(
    round_id: str,
    body: ScorecardSaveIn,
    client: QueryClient = Depends(get_store),
    writer: ScoreWriter = Depends(require_score_writer),
):
    _, matrix = await scorecard_service.load_scorecard(client, writer.event_id, round_id)
    try:
        for player in body.players:
            scorecard_service.overlay_submitted_scores(
                matrix, player.player_id, player.strokes, player.versions
            )
    except UnknownScoreTarget as exc:
        raise _unknown_target(exc)
    except ValueError as exc:
        raise _invalid_scores(exc)
    result = await scorecard_service.save_score_matrix(
        client, writer.event_id, matrix, check_versions=body.wants_version_check
    )
    return await _saved(client, writer, round_id, result)


@router.patch("/{slug}/scorecards/{round_id}", response_model=ScorecardSaveOut)
async def apply_score_mutations(
    round_id: str,
    body: ScoreMutationsIn,
    client: QueryClient = Depends(get_store),
    writer: ScoreWriter = Depends(require_score_writer),
):
    _, matrix = await scorecard_service.load_scorecard(client, writer.event_id, round_id)
    mutations = [
        AdjustStrokes(m.player_id, m.hole, m.delta)
        if isinstance(m, AdjustStrokesIn)
        else SetStrokes(m.player_id, m.hole, m.strokes)
        for m in body.mutations
    ]
    try:
        matrix.apply_all(mutations)
    except UnknownScoreTarget as exc:
        raise _unknown_target(exc)
    result = await scorecard_service.save_score_matrix(client, writer.event_id, matrix)
    return await _saved(client, writer, round_id, result)


@router.put(
    "/{slug}/scorecards/{round_id}/holes/{hole}", response_model=ScorecardSaveOut
)
async def edit_hole(
    round_id: str,
    hole: int,
    body: HoleEditIn,
    client: QueryClient = Depends(get_store),
    writer: ScoreWriter = Depends(require_score_writer),
):
    _, matrix = await scorecard_service.load_scorecard(client, writer.event_id, round_id)
    try:
        matrix.set_hole(hole, body.scores)
    except UnknownScoreTarget as exc:
        raise _unknown_target(exc)
    # nothing is written until the whole request has been checked
    try:
        await scorecard_service.check_contest_winners(
            client, writer.event_id, round_id, body.contest_winners
        )
    except ValueError as exc:
        raise _invalid_scores(exc)
    result = await scorecard_service.save_score_matrix(client, writer.event_id, matrix)
    await scorecard_service.record_contest_winners(client, round_id, body.contest_winners)
    return await _saved(client, writer, round_id, result)
