from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from app.api.deps import get_campaign
from app.api.models import (
    CampaignView,
    ChoiceRequest,
    CommandRequest,
    KeyRequest,
    KeyResponse,
    MoveRequest,
    MoveResponse,
    SelectionResponse,
    SubmitResponse,
)
from app.campaign import Campaign
from app.puzzles.maze import NAMED_DIRECTIONS
from app.websocket_hub import hub

router = APIRouter()


def _unprocessable(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.websocket("/ws/campaign")
async def campaign_updates_ws(websocket: WebSocket) -> None:
    await hub.connect(websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(websocket)
    except Exception:
        await hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/campaign", response_model=CampaignView)
async def get_campaign_route(campaign: Campaign = Depends(get_campaign)) -> CampaignView:
    return campaign.view()


@router.post("/campaign/start", response_model=CampaignView)
async def start_route(campaign: Campaign = Depends(get_campaign)) -> CampaignView:
    try:
        campaign.start()
    except ValueError as e:
        raise _unprocessable(e) from e
    return campaign.view()


@router.post("/campaign/terminal/commands", response_model=SubmitResponse)
async def submit_command_route(payload: CommandRequest, campaign: Campaign = Depends(get_campaign)) -> SubmitResponse:
    try:
        result = campaign.submit_command(payload.text)
    except ValueError as e:
        raise _unprocessable(e) from e
    return SubmitResponse(
        output_lines=list(result.output_lines),
        completed=result.completed,
        cleared=result.cleared,
        campaign=campaign.view(),
    )


@router.post("/campaign/terminal/continue", response_model=CampaignView)
async def continue_terminal_route(campaign: Campaign = Depends(get_campaign)) -> CampaignView:
    try:
        campaign.continue_terminal()
    except ValueError as e:
        raise _unprocessable(e) from e
    return campaign.view()


@router.post("/campaign/constellation/stars/{star_id}", response_model=SelectionResponse)
async def select_star_route(star_id: int, campaign: Campaign = Depends(get_campaign)) -> SelectionResponse:
    try:
        result = campaign.select_star(star_id)
    except ValueError as e:
        raise _unprocessable(e) from e
    return SelectionResponse(outcome=result.outcome.value, word=result.word, campaign=campaign.view())


@router.post("/campaign/maze/moves", response_model=MoveResponse)
async def move_route(payload: MoveRequest, campaign: Campaign = Depends(get_campaign)) -> MoveResponse:
    dx, dy = NAMED_DIRECTIONS[payload.direction]
    try:
        result = campaign.move(dx, dy)
    except ValueError as e:
        raise _unprocessable(e) from e
    return MoveResponse(
        outcome=result.outcome.value,
        position=result.position,
        message=result.message,
        campaign=campaign.view(),
    )


@router.post("/campaign/keys", response_model=KeyResponse)
async def press_key_route(payload: KeyRequest, campaign: Campaign = Depends(get_campaign)) -> KeyResponse:
    """Raw key stream: drives the hidden-code detector on every stage and the maze while it is active."""

    try:
        pressed = campaign.press_key(payload.key)
    except ValueError as e:
        raise _unprocessable(e) from e
    return KeyResponse(
        secret_unlocked=pressed.secret_unlocked,
        move=pressed.move.outcome.value if pressed.move is not None else None,
        campaign=campaign.view(),
    )


@router.post("/campaign/finale/choice", response_model=CampaignView)
async def choose_route(payload: ChoiceRequest, campaign: Campaign = Depends(get_campaign)) -> CampaignView:
    try:
        campaign.choose(payload.choice)
    except ValueError as e:
        raise _unprocessable(e) from e
    return campaign.view()
