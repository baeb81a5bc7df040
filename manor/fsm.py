from __future__ import annotations

from statemachine import State, StateMachine

from manor.api.models import Stage


class ManorFSM(StateMachine):
    """Linear path through the manor: parlor -> door unlocked -> hallway -> escaped.

    The service layer checks preconditions itself (each failure has its own status tag);
    the FSM only guards and computes the stage a successful action leads to.
    """

    parlor = State(Stage.parlor.name, value=Stage.parlor.name, initial=True)
    door_unlocked = State(Stage.door_unlocked.name, value=Stage.door_unlocked.name)
    hallway = State(Stage.hallway.name, value=Stage.hallway.name)
    escaped = State(Stage.escaped.name, value=Stage.escaped.name, final=True)

    knock = parlor.to(door_unlocked)
    enter_hallway = door_unlocked.to(hallway)
    speak_truth = hallway.to(escaped)

    def __init__(self, stage: int):
        # Stage(...) raises ValueError for anything outside 0..3.
        super().__init__(start_value=Stage(stage).name)

    @property
    def stage(self) -> Stage:
        return Stage[str(self.current_state.value)]

    def advance(self, event: str) -> Stage:
        """Fire `event` and return the stage it leads to.

        Raises `statemachine.exceptions.TransitionNotAllowed` if the event is not valid
        from the current stage.
        """

        self.send(event)
        return self.stage
