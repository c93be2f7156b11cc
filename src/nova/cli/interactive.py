#!/usr/bin/env python3
"""
Interactive CLI for Nova

A REPL (Read-Eval-Print Loop) for talking to the assistant from a terminal.
Useful for manual testing, debugging, and demonstration.

Modes:
- NLU only (--nlu-only): print the NLUResult of each message as JSON
- Dialogue (default): run the full state machine against the appointment
  and directory services at NOVA_API_BASE_URL

Usage:
    nova-chat --nlu-only
    python -m nova.cli.interactive --verbose
"""
import json
import sys
import uuid
from typing import Optional

from nova.clients import AppointmentClient, CabinetDirectoryClient
from nova.config import NovaConfig
from nova.core.pipeline import NLUPipeline
from nova.data_types import (
    ChatResponse,
    Conversation,
    ConversationContext,
    TenantInfo,
    UserInfo,
)
from nova.decision import DialogueOrchestrator
from nova.errors import InputTooLong
from nova.logging_config import setup_logging

EXIT_COMMANDS = ('quit', 'exit', 'q')


def print_banner(nlu_only: bool):
    """Print welcome banner."""
    print("\n" + "=" * 60)
    print("🦷 Nova - Assistant du cabinet dentaire")
    print("=" * 60)
    print(f"\nMode: {'NLU only' if nlu_only else 'dialogue'}")
    print("\nCommands:")
    print("  - Type a message in French")
    print("  - Type 'reset' to start a new conversation")
    print("  - Type 'quit' or 'exit' to quit")
    print("\nExamples:")
    print("  - 'je voudrais prendre rendez-vous demain matin'")
    print("  - 'quels sont vos horaires ?'")
    print("  - 'annuler mon rendez-vous, mon mail est jean.dupont@gmail.com'")
    print("=" * 60)


def new_context(config: NovaConfig, tenant_id: str, timezone: Optional[str] = None) -> ConversationContext:
    return ConversationContext(
        session_id=f"cli-{uuid.uuid4().hex[:8]}",
        user=UserInfo(id="cli-user"),
        tenant=TenantInfo(id=tenant_id, timezone=timezone or config.DEFAULT_TIMEZONE),
        conversation=Conversation(),
    )


def print_response(response: ChatResponse, context: ConversationContext, verbose: bool = False):
    print(f"\n🤖 {response.message}")
    if response.options:
        for option in response.options:
            print(f"   [{option['value']}] {option['label']}")
    if response.suggested_replies:
        print(f"   💡 {' | '.join(response.suggested_replies)}")
    if response.escalate:
        print("   🚨 Transfert vers un humain")

    if verbose:
        conversation = context.conversation
        print(f"\n   state={conversation.state.value} intent={conversation.current_intent} "
              f"pending={conversation.confirmation_pending}")
        print(f"   slots={json.dumps(conversation.collected_slots, ensure_ascii=False)}")


def interactive_main(
    config: NovaConfig,
    nlu_only: bool = False,
    verbose: bool = False,
    tenant_id: str = "cabinet-1",
    timezone: Optional[str] = None
):
    """
    Interactive loop.

    Args:
        config: Nova configuration
        nlu_only: Only run the NLU pipeline, no dialogue and no HTTP calls
        verbose: Show dialogue state after each turn
        tenant_id: Cabinet identifier sent to the services
        timezone: Cabinet timezone (defaults to NOVA_DEFAULT_TIMEZONE)
    """
    pipeline = NLUPipeline(config=config)
    orchestrator = None
    if not nlu_only:
        orchestrator = DialogueOrchestrator(
            pipeline,
            AppointmentClient(base_url=config.API_BASE_URL, timeout=config.API_TIMEOUT),
            CabinetDirectoryClient(base_url=config.API_BASE_URL, timeout=config.API_TIMEOUT),
            config=config,
        )

    print_banner(nlu_only)
    context = new_context(config, tenant_id, timezone)

    while True:
        try:
            message = input("\n💬 Vous: ").strip()

            if not message or message.lower() in EXIT_COMMANDS:
                print("\n👋 Au revoir !")
                break

            if message.lower() == 'reset':
                context = new_context(config, tenant_id, timezone)
                print("🔄 Nouvelle conversation")
                continue

            try:
                if orchestrator is None:
                    result = pipeline.analyze(message, context)
                    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
                else:
                    response = orchestrator.handle_message(message, context)
                    print_response(response, context, verbose=verbose)
            except InputTooLong as e:
                print(f"❌ {e}")

        except KeyboardInterrupt:
            print("\n\n👋 Au revoir !")
            break


def main():
    """Entry point for the interactive CLI."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Nova - Interactive Mode",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--nlu-only',
        action='store_true',
        help='Only print NLU results (no dialogue, no HTTP calls)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show dialogue state after each turn'
    )
    parser.add_argument(
        '--tenant-id',
        default='cabinet-1',
        help='Cabinet identifier (default: cabinet-1)'
    )
    parser.add_argument(
        '--timezone',
        default=None,
        help='Cabinet timezone (default: NOVA_DEFAULT_TIMEZONE)'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        help='Logging level (default: LOG_LEVEL or INFO)'
    )
    parser.add_argument(
        '--log-format',
        default='pretty',
        choices=['json', 'pretty'],
        help='Log format (default: pretty)'
    )

    args = parser.parse_args()

    config = NovaConfig()
    setup_logging('nova', args.log_level or config.LOG_LEVEL, args.log_format, config.LOG_FILE)

    try:
        interactive_main(
            config,
            nlu_only=args.nlu_only,
            verbose=args.verbose,
            tenant_id=args.tenant_id,
            timezone=args.timezone,
        )
    except KeyboardInterrupt:
        print("\n\n👋 Au revoir !")
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
