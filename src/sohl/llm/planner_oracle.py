from src.sohl.models import (
    AIPlannedAction,
    AIPlanProposal,
    ImpactResult,
    PlannedActionType,
    SuccessTestResult,
)
from src.sohl.llm.prompts import PlannerPrompts
from src.sohl.llm.exceptions import JSONExtractionError, PlanParseError, ValidationFailedError
from src.sohl.llm.client import OllamaClient
import json
import re
import logging
from typing import Iterable
from pydantic import ValidationError


logger = logging.getLogger(__name__)

# Loose spellings models tend to produce, keyed by their squashed form
ACTION_TYPE_ALIASES = {
    "create": PlannedActionType.CREATE_DOCUMENT,
    "modify": PlannedActionType.MODIFY_DOCUMENT,
    "update": PlannedActionType.MODIFY_DOCUMENT,
    "updatedocument": PlannedActionType.MODIFY_DOCUMENT,
    "delete": PlannedActionType.DELETE_DOCUMENT,
    "advancetime": PlannedActionType.ADVANCE_GAME_TIME,
    "pause": PlannedActionType.PAUSE_GAME,
    "resume": PlannedActionType.RESUME_GAME,
    "unpause": PlannedActionType.RESUME_GAME,
    "combatstart": PlannedActionType.START_COMBAT,
    "combatend": PlannedActionType.END_COMBAT,
}


class PlannerOracle:
    """
    LLM interface for the planning assistant.
    Turns game-master requests into AIPlanProposals awaiting approval.
    """

    def __init__(self, llm_client: OllamaClient):
        self.llm = llm_client


    def propose_plan(
        self,
        request: str,
        context: str = "",
        action_types: Iterable[PlannedActionType] | None = None,
    ) -> AIPlanProposal:
        """
        Ask the assistant for a plan. The returned proposal is pending;
        submit it to a PlanWorkflow for approval.
        """
        prompt = PlannerPrompts.PROPOSE_PLAN.format(
            request=request,
            context=context or "(no additional context)",
            action_types=self._format_action_types(action_types),
        )
        response = self.llm.generate(prompt, system=PlannerPrompts.SYSTEM.value, json_mode=True)
        proposal = self._parse_plan_proposal(response)
        logger.info("Proposed plan %s with %d action(s)", proposal.plan_id, len(proposal.actions))
        return proposal


    def revise_plan(self, proposal: AIPlanProposal, feedback: str) -> AIPlanProposal:
        """
        Ask for a revised version of a plan. The result is a new pending
        proposal whose revision_of points at the original.
        """
        plan_json = json.dumps(
            {
                "summary": proposal.summary,
                "actions": [a.model_dump(mode="json") for a in proposal.actions],
                "assumptions": sorted(proposal.assumptions),
            },
            indent=2,
        )
        prompt = PlannerPrompts.REVISE_PLAN.format(plan=plan_json, feedback=feedback)
        response = self.llm.generate(prompt, system=PlannerPrompts.SYSTEM.value, json_mode=True)
        return self._parse_plan_proposal(response, revision_of=proposal.plan_id)


    def simulate_outcome(self, description: str) -> str:
        """Prose guess at what carrying out a description would lead to"""
        prompt = PlannerPrompts.SIMULATE_OUTCOME.format(description=description)
        return self.llm.generate(prompt, system=PlannerPrompts.SYSTEM.value)


    def narrate_result(self, result: SuccessTestResult, impact: ImpactResult | None = None) -> str:
        """Flavor text for a resolved test and, optionally, its impact"""
        impact_line = ""
        if impact is not None:
            if impact.delivers_impact:
                impact_line = f"IMPACT: {impact.effective_impact()} {impact.aspect.value}\n"
            else:
                impact_line = "IMPACT: none, the blow was negated\n"

        prompt = PlannerPrompts.NARRATE_RESULT.format(
            speaker=result.speaker.display_name if result.speaker else "Someone",
            title=result.title or "Test",
            roll=result.roll.total,
            target=result.target_value,
            outcome=result.result_text,
            impact=impact_line,
        )
        return self.llm.generate(prompt)


    def _format_action_types(self, action_types: Iterable[PlannedActionType] | None) -> str:
        types = list(action_types) if action_types is not None else list(PlannedActionType)
        return "\n".join(f"- {t.value}" for t in types)


    def _extract_json_from_response(self, response: str) -> dict:
        """
        Extract JSON from an LLM response that may contain surrounding text.

        Handles common LLM output patterns:
        - Pure JSON
        - JSON wrapped in markdown code blocks
        - JSON with preamble/postamble text
        """
        response = response.strip()

        # Try 1: Direct JSON parse
        try:
            return json.loads(response)
        except json.JSONDecodeError:
            pass

        # Try 2: Markdown code blocks, ```json ... ``` or ``` ... ```
        code_block_pattern = r'```(?:json)?\s*\n?(.*?)\n?```'
        for match in re.findall(code_block_pattern, response, re.DOTALL):
            try:
                return json.loads(match.strip())
            except json.JSONDecodeError:
                continue

        # Try 3: Outermost { ... } by brace matching
        brace_depth = 0
        start_idx = None

        for i, char in enumerate(response):
            if char == '{':
                if brace_depth == 0:
                    start_idx = i
                brace_depth += 1
            elif char == '}' and brace_depth > 0:
                brace_depth -= 1
                if brace_depth == 0 and start_idx is not None:
                    try:
                        return json.loads(response[start_idx:i + 1])
                    except json.JSONDecodeError:
                        start_idx = None
                        continue

        raise JSONExtractionError(
            f"Could not extract valid JSON from response. "
            f"Response preview: {response[:200]}..."
        )


    def _normalize_action_type(self, value: str) -> str:
        """
        Map loose spellings onto PlannedActionType values:
        'CREATE_DOCUMENT', 'create document', 'createdocument' -> 'createDocument'.
        Unrecognized values pass through for validation to reject.
        """
        squashed = re.sub(r'[^a-z]', '', str(value).lower())

        for member in PlannedActionType:
            if member.value.lower() == squashed:
                return member.value

        if squashed in ACTION_TYPE_ALIASES:
            return ACTION_TYPE_ALIASES[squashed].value

        return str(value).strip()


    def _parse_planned_action(self, data: dict) -> AIPlannedAction:
        """Parse a single AIPlannedAction from dict data."""
        payload = data.get("payload") or {}
        preview = data.get("preview")
        return AIPlannedAction(
            type=self._normalize_action_type(data.get("type", "")),
            description=str(data.get("description", "")),
            payload=payload if isinstance(payload, dict) else {"value": payload},
            preview=str(preview) if preview is not None else None,
        )


    def _parse_plan_proposal(self, llm_response: str, revision_of: str | None = None) -> AIPlanProposal:
        """
        Parse an LLM response into a pending AIPlanProposal.

        Raises:
            JSONExtractionError: If no valid JSON could be extracted from response.
            ValidationFailedError: If extracted JSON doesn't conform to the plan schema.
            PlanParseError: For other parsing failures.
        """
        data = self._extract_json_from_response(llm_response)

        try:
            actions_raw = data.get("actions", [])
            if not isinstance(actions_raw, list):
                raise PlanParseError(f"'actions' must be a list, got {type(actions_raw).__name__}")

            actions = [
                self._parse_planned_action(a) if isinstance(a, dict) else a
                for a in actions_raw
            ]

            assumptions = data.get("assumptions") or []
            if isinstance(assumptions, str):
                assumptions = [assumptions]

            return AIPlanProposal(
                summary=str(data.get("summary", "")),
                actions=actions,
                assumptions=frozenset(str(a) for a in assumptions),
                revision_of=revision_of,
            )

        except PlanParseError:
            raise
        except ValidationError as e:
            raise ValidationFailedError(f"Plan proposal validation failed: {e}") from e
        except Exception as e:
            raise PlanParseError(f"Failed to parse plan proposal: {e}") from e
