from __future__ import annotations

from typing import Dict, Tuple

from ..core.agent import Team
from ..types.events import EventKind

LINES: Dict[Tuple[EventKind, Team], Tuple[str, ...]] = {
    (EventKind.BOOST, Team.REINDEER): (
        "Warm. So warm.",
        "We could share this.",
        "Your antlers... no, my antlers.",
        "Stay. Just for a while.",
    ),
    (EventKind.BOOST, Team.RABBIT): (
        "Sweet! Sweeter with you.",
        "Truce? Truce.",
        "My heart is racing.",
        "Is this what friends are?",
    ),
    (EventKind.CROSS_KILL, Team.REINDEER): (
        "The herd remembers.",
        "Too slow, little one.",
        "Grass grows over everything.",
    ),
    (EventKind.CROSS_KILL, Team.RABBIT): (
        "Fast beats big.",
        "Never turn your back.",
        "One less shadow.",
    ),
    (EventKind.SAME_KILL, Team.REINDEER): (
        "Only the strong walk on.",
        "Forgive me, brother.",
    ),
    (EventKind.SAME_KILL, Team.RABBIT): (
        "There was not enough room.",
        "Sorry. Not sorry.",
    ),
    (EventKind.IDLE, Team.REINDEER): (
        "Where does the fence end?",
        "Who put us here?",
        "The walls are closer today.",
        "I dreamed of snow.",
    ),
    (EventKind.IDLE, Team.RABBIT): (
        "Someone is watching.",
        "Hop. Hop. Wait.",
        "I smell something sweet.",
        "Are we the experiment?",
    ),
}


def lines_for(kind: EventKind, team: Team) -> Tuple[str, ...]:
    return LINES.get((kind, team), ())
