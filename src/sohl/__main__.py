"""Entry point for the SoHL resolution console."""

import shlex

from src.sohl.config.settings import settings
from src.sohl.utils.logging import setup_logging
from src.sohl.core import (
    AttackRequest,
    CommandDefinition,
    PlanExecutor,
    PlanWorkflow,
    ResolutionEngine,
    initialize_resolution_engine,
)
from src.sohl.exceptions import SohlError
from src.sohl.llm import OllamaClient, PlannerOracle, PlanParseError
from src.sohl.models import (
    AIExecutionResult,
    Aspect,
    ImpactModifier,
    Modifier,
    ModifierStack,
    PlannedActionType,
    SimpleRoll,
)

HELP_TEXT = """Commands:
  test <base> [name=value ...]                     Roll a success test
  attack <base> <impact> <aspect> [name=value ...] Roll an attack and its impact
  plan <request>                                   Ask the assistant for a plan
  approve <plan_id>                                Approve and run a plan
  reject <plan_id> [reason]                        Reject a plan
  revise <plan_id> <feedback>                      Ask for a revised plan
  pending                                          List plans awaiting review
  quit"""


def parse_modifiers(tokens: list[str]) -> list[Modifier]:
    """Parse 'name=value' tokens, e.g. 'SitMod=-10'."""
    modifiers = []
    for token in tokens:
        name, sep, value = token.partition("=")
        if not sep or not name:
            raise ValueError(f"Modifier must look like name=value, got '{token}'")
        modifiers.append(Modifier(name=name, value=int(value)))
    return modifiers


def echo_command(action_type: PlannedActionType) -> CommandDefinition:
    """A command that only reports what it would do. Nothing is attached to a live game."""
    def execute(payload: dict) -> AIExecutionResult:
        return AIExecutionResult(message=f"{action_type.value}: {payload}", result=payload)

    return CommandDefinition(type=action_type, description=f"Report a {action_type.value} action", execute=execute)


class SohlConsole:
    """Routes console commands to the resolution engine and the plan workflow."""

    def __init__(
        self,
        engine: ResolutionEngine,
        workflow: PlanWorkflow,
        executor: PlanExecutor,
        planner: PlannerOracle | None = None,
    ):
        self.engine = engine
        self.workflow = workflow
        self.executor = executor
        self._planner = planner

    @property
    def planner(self) -> PlannerOracle:
        # Built on first use so dice commands work without an Ollama server
        if self._planner is None:
            client = OllamaClient(
                model_name=settings.planner_model,
                base_url=settings.ollama_host,
                timeout=settings.llm_timeout,
            )
            self._planner = PlannerOracle(client)
        return self._planner

    def process_input(self, text: str) -> str:
        tokens = shlex.split(text)
        command, args = tokens[0].lower(), tokens[1:]

        handler = getattr(self, f"_cmd_{command}", None)
        if handler is None:
            return f"Unknown command '{command}'.\n{HELP_TEXT}"
        return handler(args)

    def _cmd_help(self, args: list[str]) -> str:
        return HELP_TEXT

    def _cmd_test(self, args: list[str]) -> str:
        if not args:
            return "Usage: test <base> [name=value ...]"
        stack = ModifierStack(modifiers=parse_modifiers(args[1:]))
        result = self.engine.run_success_test(int(args[0]), modifiers=stack)
        line = f"[{result.result_text.upper()}] rolled {result.roll.total} vs {result.target_value}"
        if not stack.empty:
            line += f" ({stack.abbrev})"
        return line

    def _cmd_attack(self, args: list[str]) -> str:
        if len(args) < 3:
            return "Usage: attack <base> <impact> <aspect> [name=value ...]"
        dice = SimpleRoll.from_formula(args[1])
        impact_modifier = ImpactModifier(
            aspect=Aspect(args[2].lower()),
            num_dice=dice.num_dice,
            die=dice.die,
        )
        if dice.static_modifier:
            impact_modifier.add("Weapon", dice.static_modifier)

        resolution = self.engine.resolve_attack(
            AttackRequest(
                base_value=int(args[0]),
                modifiers=parse_modifiers(args[3:]),
                impact_modifier=impact_modifier,
            )
        )
        return "\n".join(resolution.narration_fragments)

    def _cmd_plan(self, args: list[str]) -> str:
        if not args:
            return "Usage: plan <request>"
        proposal = self.planner.propose_plan(" ".join(args), action_types=list(PlannedActionType))
        self.workflow.submit(proposal)
        return self._describe_plan(proposal)

    def _cmd_pending(self, args: list[str]) -> str:
        pending = self.workflow.pending()
        if not pending:
            return "No plans awaiting review."
        return "\n".join(f"{p.plan_id}: {p.summary}" for p in pending)

    def _cmd_approve(self, args: list[str]) -> str:
        if not args:
            return "Usage: approve <plan_id>"
        proposal = self.workflow.approve(args[0])
        results = self.executor.execute(proposal)
        return "\n".join(f"  {r.message}" for r in results) or "Plan approved (no actions)."

    def _cmd_reject(self, args: list[str]) -> str:
        if not args:
            return "Usage: reject <plan_id> [reason]"
        self.workflow.reject(args[0], reason=" ".join(args[1:]))
        return f"Plan {args[0]} rejected."

    def _cmd_revise(self, args: list[str]) -> str:
        if len(args) < 2:
            return "Usage: revise <plan_id> <feedback>"
        original = self.workflow.get(args[0])
        revision = self.planner.revise_plan(original, " ".join(args[1:]))
        self.workflow.adopt_revision(revision)
        return self._describe_plan(revision)

    def _describe_plan(self, proposal) -> str:
        lines = [f"Plan {proposal.plan_id}: {proposal.summary}"]
        for index, action in enumerate(proposal.actions, start=1):
            lines.append(f"  {index}. [{action.type.value}] {action.description}")
        for assumption in sorted(proposal.assumptions):
            lines.append(f"  assumes: {assumption}")
        return "\n".join(lines)


# ─────────────────────────────────────────────────────────────────────────────
# Console Loop
# ─────────────────────────────────────────────────────────────────────────────
def get_player_input() -> str | None:
    """Get input from the user, handling EOF and interrupts."""
    try:
        text = input("\n> ").strip()
        return text if text else None
    except (EOFError, KeyboardInterrupt):
        return "quit"


def console_loop(console: SohlConsole) -> None:
    """Main loop - process commands until quit."""

    while True:
        user_input = get_player_input()

        if user_input is None:
            print("(Type 'help' for commands)")
            continue

        if user_input.lower() in ("quit", "exit", "q"):
            print("Farewell.")
            break

        try:
            response = console.process_input(user_input)
            print(f"\n{response}")

        except (SohlError, PlanParseError, ValueError, KeyError) as e:
            print(f"\n[ERROR] {e}")


def main() -> None:
    """Main entry point."""
    logger = setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        enable_color=settings.enable_color,
    )

    logger.info("Starting SoHL console")
    logger.debug(f"Configuration: {settings}")

    engine = initialize_resolution_engine(
        variant=settings.variant,
        threshold_overrides=settings.threshold_overrides(),
        seed=settings.seed,
    )
    executor = PlanExecutor([echo_command(t) for t in PlannedActionType])
    console = SohlConsole(engine, PlanWorkflow(), executor)

    print(f"Song of Heroic Lands - {engine.system.title} rules.")
    print(HELP_TEXT)
    console_loop(console)


if __name__ == "__main__":
    main()
