from __future__ import annotations

from statemachine import State, StateMachine

from app.api.models import CampaignState, Stage


class StageFSM(StateMachine):
    """FSM wrapper around CampaignState.

    Stages only move forward, one step at a time:
    landing -> terminal -> constellation -> maze -> finale -> celebration.
    The controller checks puzzle preconditions; the FSM only guards the ordering.
    """

    landing = State(Stage.landing.value, value=Stage.landing.value, initial=True)
    terminal = State(Stage.terminal.value, value=Stage.terminal.value)
    constellation = State(Stage.constellation.value, value=Stage.constellation.value)
    maze = State(Stage.maze.value, value=Stage.maze.value)
    finale = State(Stage.finale.value, value=Stage.finale.value)
    celebration = State(Stage.celebration.value, value=Stage.celebration.value, final=True)

    accept_challenge = landing.to(terminal)
    leave_terminal = terminal.to(constellation)
    chart_constellation = constellation.to(maze)
    escape_maze = maze.to(finale)
    answer = finale.to(celebration)

    def __init__(self, campaign: CampaignState):
        self.campaign = campaign
        super().__init__(start_value=campaign.stage.value)

    @property
    def stage(self) -> Stage:
        return Stage(str(self.current_state.value))

    def sync_stage_to_model(self) -> None:
        self.campaign.stage = self.stage
