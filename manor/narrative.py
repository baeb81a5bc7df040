from __future__ import annotations

from manor.api.models import ManorStatus, Stage


PARLOR_ENTERED = (
    "You open your eyes to a dimly lit parlor. The fire in the chimney is cold, and a portrait watches you from the wall. "
    "Dust particles float in the stale air, catching what little light filters through the grimy windows. "
    "The floorboards creak beneath your feet. A message is carved into the wooden table."
)
PARLOR_INSCRIPTION = '"Only those who listen to the house will find the way out."'

DOOR_ALREADY_UNLOCKED = "You've already passed through this door. The way forward lies elsewhere."
DOOR_LOCKED = (
    "You whisper the wrong word. The silence grows heavier. Something moves in the dark behind you. "
    "A cold breath touches the back of your neck. The house is watching... waiting."
)
DOOR_LOCKED_INSCRIPTION = "Listen to the house. What does it want you to do?"
DOOR_UNLOCKED = (
    "You knock three times. The sound echoes through the empty house like thunder. "
    "A loud creak echoes through the house. The door slowly opens to a candlelit hallway, "
    "revealing flickering shadows that dance along the walls."
)
DOOR_UNLOCKED_INSCRIPTION = "Continue your journey with GET /hallway"

ACCESS_DENIED = (
    "The door to the hallway is locked. You cannot proceed without unlocking it first. "
    "The house whispers: 'You must earn your passage...'"
)
ACCESS_DENIED_INSCRIPTION = "Return to the parlor and unlock the door."
HALLWAY_ALREADY_EXPLORED = "You've already explored this hallway. The way forward lies at the end of your journey."
HALLWAY_ENTERED = (
    "🕯️ The hallway stretches endlessly before you. Candles flicker as you pass, though there's no breeze. "
    "Portraits of long-dead family members line the walls, their eyes seeming to follow your every move. "
    "One painting has eyes that seem particularly alive, almost... knowing. "
    "Beneath it, a small box sits on a dusty table, locked with an ornate mechanism. "
    "An inscription glows faintly in the candlelight."
)
HALLWAY_INSCRIPTION = '"Truth opens what fear locks."'

ESCAPE_PREMATURE = (
    "⛔ You cannot escape yet. You haven't explored enough of the manor. "
    "The house won't let you leave so easily. Dark whispers fill your ears: 'Not yet... not yet...'"
)
ESCAPE_PREMATURE_INSCRIPTION = "Complete your journey through the manor first."
ESCAPE_FAILED = (
    "😈 A ghostly laughter echoes through the house, growing louder and more sinister. "
    "You weren't ready. The door slams shut again with a deafening bang. "
    "The candles extinguish one by one. In the darkness, you hear footsteps... "
    "approaching... closer... closer... Then silence. "
    "The curse remains unbroken."
)
ESCAPE_FAILED_INSCRIPTION = "The house demands truth. What is the key to breaking the curse?"
ESCAPED = (
    "You speak the word 'truth' into the silence. The house shudders violently. "
    "The portraits begin to smile, their eyes closing peacefully for the first time in centuries. "
    "The manor trembles as the walls begin to fade like morning mist. "
    "Light floods through dissolving windows. You step into the moonlight — free at last. "
    "Behind you, Blackwood Manor crumbles into silvery mist, its spirits finally released. "
    "The curse is broken."
)
ESCAPED_INSCRIPTION = "Congratulations! You have survived the Haunting of Blackwood Manor!"


_STATUS_BY_STAGE: dict[int, tuple[ManorStatus, str]] = {
    Stage.parlor: (
        ManorStatus.in_parlor,
        "You are in the parlor. The door awaits. POST to /door with the correct key.",
    ),
    Stage.door_unlocked: (
        ManorStatus.door_unlocked,
        "You've unlocked the door. Use GET /hallway to continue your journey.",
    ),
    Stage.hallway: (
        ManorStatus.in_hallway,
        "You're in the hallway. The final challenge awaits. POST to /escape with the key to freedom.",
    ),
    Stage.escaped: (
        ManorStatus.escaped,
        "You have escaped Blackwood Manor! The nightmare is over.",
    ),
}

_LOST = (ManorStatus.lost, "Unknown location. The house is confused...")


def describe_stage(stage: int) -> tuple[ManorStatus, str]:
    """Status tag and narrative for a stage as reported by /status."""

    return _STATUS_BY_STAGE.get(stage, _LOST)
