from enum import Enum

class PlannerPrompts(str, Enum):
    SYSTEM = """You are Sage, the game-master's assistant for a Song of Heroic Lands campaign.
You never change the game directly. You propose plans; a human approves, rejects
or asks for revisions. Every plan must be a short ordered list of concrete actions."""
    PROPOSE_PLAN = """The game-master asks: "{request}"

CURRENT SITUATION:
{context}

AVAILABLE ACTION TYPES:
{action_types}

Break the request into the smallest ordered list of actions that achieves it.
List any assumptions you had to make about missing details.

Respond in the following JSON format:
{{
    "summary": "One sentence describing the whole plan",
    "actions": [
        {{
            "type": "createDocument",
            "description": "Create a Longsword item for Aldric",
            "payload": {{"documentType": "Item", "name": "Longsword"}},
            "preview": null
        }}
    ],
    "assumptions": ["Aldric is the player character's actor"]
}}
"""
    REVISE_PLAN = """You proposed this plan:
{plan}

The game-master asked for a revision:
"{feedback}"

Produce the revised plan. Keep actions the game-master did not object to, drop or
change the rest. Use the same JSON format as before:
{{
    "summary": "...",
    "actions": [{{"type": "...", "description": "...", "payload": {{}}, "preview": null}}],
    "assumptions": []
}}
"""
    SIMULATE_OUTCOME = """Describe, in two or three sentences of plain prose, what would most likely
happen in the game if the following were carried out:

{description}

Do not propose actions. Do not use JSON."""
    NARRATE_RESULT = """Narrate this dice result for the players in one or two vivid sentences.

WHO: {speaker}
TEST: {title}
ROLL: {roll} against a target of {target}
OUTCOME: {outcome}
{impact}
Do not mention the numbers."""
