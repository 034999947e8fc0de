import argparse
import asyncio
import json
import sys

from supabase import acreate_client

from api.deps import DEFAULT_CATALOG_SEED, build_parse_workout_use_case
from application.exceptions import WorkoutParserError
from backend.ai import ReasoningClient
from backend.services.audit_notifier import AuditNotifier
from backend.services.embedding_service import EmbeddingService
from backend.settings import get_settings
from infrastructure import (
    InMemoryExerciseCatalog,
    InMemoryUnresolvedMentionRepository,
    SupabaseExerciseCatalog,
    SupabaseUnresolvedMentionRepository,
)


async def parse_text(text, date=None, weight_unit=None, user_id=None):
    settings = get_settings()

    if settings.catalog_backend == "memory":
        catalog = InMemoryExerciseCatalog.from_yaml(settings.catalog_seed_path or DEFAULT_CATALOG_SEED)
        audit_repo = InMemoryUnresolvedMentionRepository()
    else:
        if not settings.supabase_url or not settings.supabase_key:
            raise SystemExit("Supabase credentials not configured (or set CATALOG_BACKEND=memory)")
        client = await acreate_client(settings.supabase_url, settings.supabase_key)
        catalog = SupabaseExerciseCatalog(client)
        audit_repo = SupabaseUnresolvedMentionRepository(client)

    embedding_service = None
    if settings.embeddings_configured:
        embedding_service = EmbeddingService(model=settings.embedding_model, user_id=user_id)

    audit = AuditNotifier(audit_repo)
    use_case = build_parse_workout_use_case(
        settings,
        catalog,
        ReasoningClient(settings=settings),
        embedding_service=embedding_service,
        audit_notifier=audit,
    )
    try:
        result = await use_case.execute(text, date=date, weight_unit=weight_unit, user_id=user_id)
    finally:
        await audit.drain()
    return result.workout.model_dump(by_alias=True)


def main():
    parser = argparse.ArgumentParser(description="Parse a free-form workout into catalog-resolved JSON")
    parser.add_argument("input", help="Workout text file path ('-' for stdin)")
    parser.add_argument("-o", "--output", help="Output JSON file path (default: stdout)")
    parser.add_argument("--date", help="Workout date (YYYY-MM-DD, default: today)")
    parser.add_argument("--unit", choices=["lbs", "kg"], help="Weight unit")
    parser.add_argument("--user-id", help="User ID for audit records")

    args = parser.parse_args()

    try:
        if args.input == "-":
            text = sys.stdin.read()
        else:
            with open(args.input, 'r') as f:
                text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    try:
        workout = asyncio.run(parse_text(text, date=args.date, weight_unit=args.unit, user_id=args.user_id))
    except WorkoutParserError as e:
        print(f"Error ({e.stage}): {e.public_message}", file=sys.stderr)
        sys.exit(2)

    output = json.dumps(workout, indent=2)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(output)
    else:
        print(output)


if __name__ == "__main__":
    main()
