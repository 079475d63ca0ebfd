"""
CLI Interface for the Incorporation Chat

Runs the incorporation questionnaire in the terminal and hands the
finished answers to the configured lead sink.
"""

import argparse
import sys
from typing import Optional

from .agents.incorporation_chat_agent import IncorporationChatAgent
from .config import LEAD_SINK_CHOICES, load_config
from .exceptions import InvalidContactError, LeadSinkError, RejectedEvent
from .leads.sink import ContactDetails, LeadSink, create_lead_sink
from .logging_config import configure_logging
from .schemas.questions import DEFAULT_CATALOG, Question
from .schemas.transcript import Turn, TurnKind


def print_header():
    """Print CLI header."""
    print("""
╔═══════════════════════════════════════════════════════════════╗
║                                                               ║
║     INCORPIFY - Incorporation Chat                            ║
║                                                               ║
║     Answer a few questions to get your personalized plan      ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """)


def print_turn(agent: IncorporationChatAgent, turn: Turn):
    """Print a transcript turn."""
    if turn.kind == TurnKind.GREETING:
        print(f"\n{turn.text}")
        if turn.subtext:
            print(turn.subtext)

    elif turn.kind == TurnKind.QUESTION:
        progress = agent.progress(turn.question.id)
        print()
        if progress.visible:
            print(f"[{progress.label}]")
        print(turn.text)
        if turn.subtext:
            print(f"  ({turn.subtext})")
        for i, option in enumerate(turn.question.options, 1):
            print(f"  {i}. {option.text}")

    elif turn.kind == TurnKind.ANSWER:
        print(f"  > {turn.text}")

    elif turn.kind == TurnKind.COMPLETION:
        print(f"\n{turn.text}")
        print("\nRecommended services:")
        for service in turn.services:
            print(f"  - {service}")


def _option_at(question: Question, raw: str) -> Optional[str]:
    """Map a 1-based option number to an option id."""
    raw = raw.strip()
    if not raw.isdigit():
        return None
    index = int(raw) - 1
    if 0 <= index < len(question.options):
        return question.options[index].id
    return None


def ask_question(agent: IncorporationChatAgent, question: Question) -> list:
    """Prompt until the current question is answered. Returns appended turns."""
    while True:
        if not question.multi_select:
            raw = input("\nYour choice: ")
            option_id = _option_at(question, raw)
            if option_id is None:
                print(f"Please enter a number between 1 and {len(question.options)}.")
                continue
            return agent.submit_single(question.id, option_id)

        selected = agent.selection(question.id)
        labels = [question.get_option(o).text for o in selected]
        print(f"\nSelected: {', '.join(labels) if labels else '(none)'}")
        raw = input("Toggle options (e.g. 1,3) or press Enter to continue: ").strip()

        if not raw:
            try:
                return agent.submit_multi(question.id)
            except RejectedEvent as e:
                print(str(e))
                continue

        for part in raw.split(","):
            option_id = _option_at(question, part)
            if option_id is None:
                print(f"Ignoring '{part.strip()}': not an option number.")
                continue
            agent.toggle_multi(question.id, option_id)


def collect_contact() -> ContactDetails:
    """Ask for contact details until they validate."""
    while True:
        contact = ContactDetails(
            name=input("Full name: ").strip(),
            email=input("Email: ").strip(),
            phone=input("Phone: ").strip(),
        )
        errors = contact.errors()
        if not errors:
            return contact
        for message in errors.values():
            print(f"  ! {message}")


def run_interactive_chat(agent: IncorporationChatAgent, sink: LeadSink) -> Optional[dict]:
    """Run an interactive chat session in the terminal."""
    for turn in agent.transcript:
        print_turn(agent, turn)

    while not agent.is_complete():
        for turn in ask_question(agent, agent.current_question):
            print_turn(agent, turn)

    answer = input("\nGet your personalized plan? (y/n): ").strip().lower()
    if answer not in ("y", "yes"):
        print("No problem - your answers were not submitted.")
        return None

    contact = collect_contact()
    try:
        lead = agent.submit_lead(contact, sink)
    except (InvalidContactError, LeadSinkError) as e:
        print(f"\nSorry, we couldn't save your details: {e}")
        return None

    print("\nThank you! Our team will be in touch soon.")
    return lead


def list_flows():
    """Print every flow and its questions."""
    catalog = DEFAULT_CATALOG
    print("Entry question:\n")
    for question in catalog.seed:
        print(f"  {question.id}: {question.text}")
    print(f"  {catalog.incorporation_country.id}: {catalog.incorporation_country.text}\n")

    for flow in ("new", "existing_uae", "existing_other"):
        questions = catalog.get_sequence(flow)
        print(f"Flow '{flow}' ({len(questions)} questions):")
        for i, question in enumerate(questions, 1):
            kind = " [multi-select]" if question.multi_select else ""
            print(f"  {i}. {question.id}: {question.text}{kind}")
        print()


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Incorpify incorporation chat",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start an interactive chat (lead sink from INCORPIFY_LEAD_SINK, default memory)
  python -m incorpify.cli

  # Send the finished lead to the configured webhook
  python -m incorpify.cli --sink webhook

  # Show all flows and questions
  python -m incorpify.cli --list-flows
        """
    )

    parser.add_argument(
        "--sink", "-s",
        choices=LEAD_SINK_CHOICES,
        help="Lead sink to use (overrides INCORPIFY_LEAD_SINK)"
    )

    parser.add_argument(
        "--env-file",
        help="Path to a .env file (default: .env in the working directory)"
    )

    parser.add_argument(
        "--list-flows",
        action="store_true",
        help="List all flows and their questions and exit"
    )

    args = parser.parse_args(argv)

    config = load_config(args.env_file)
    if args.sink:
        config.lead_sink = args.sink
    configure_logging(config.log_level)

    if args.list_flows:
        list_flows()
        return 0

    print_header()
    agent = IncorporationChatAgent()
    sink = create_lead_sink(config)

    try:
        run_interactive_chat(agent, sink)
    except (KeyboardInterrupt, EOFError):
        print("\nChat ended.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
