"""
Command line entry point for the schedule optimizer bridge.
Runs one AI generation for a schedule, or compares two schedules.
"""

import sys
import argparse
from datetime import datetime
import os

# Add backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import LOG_LEVEL
from app.core.logging_config import setup_logging
from app.models import GenerationMode
from app.services.generation_service import build_default_service


def print_generation(result):
    print("\n" + "=" * 80)
    print("GENERATION RESULT")
    print("=" * 80)
    print(f"Schedule:           {result.schedule_id}")
    print(f"Mode:               {result.mode.value}")
    print(f"Success:            {'Yes' if result.success else 'No'}")
    print(f"Message:            {result.message}")
    if result.job_id:
        print(f"Job:                {result.job_id} ({result.status.value if result.status else 'unknown'})")
    if result.error_kind:
        print(f"Error kind:         {result.error_kind.value}")
    if result.success:
        print(f"Score:              {result.hard_score}hard/{result.soft_score}soft")
        print(f"Sections created:   {result.sections_created}")
        print(f"Students scheduled: {result.students_scheduled}")
        print(f"Manual review:      {'Yes' if result.requires_manual_review else 'No'}")
    if result.validation:
        print(f"Conflicts:          {result.validation.conflict_count}")
        for conflict in result.validation.conflicts[:10]:
            print(f"  - {conflict}")
    print(f"Elapsed:            {result.elapsed_seconds:.1f}s")
    print("=" * 80)


def print_comparison(result):
    print("\n" + "=" * 80)
    print("SCHEDULE COMPARISON")
    print("=" * 80)
    print(f"Schedule {result.schedule_a_id}: {result.schedule_a_conflicts} conflicts, "
          f"{result.schedule_a_hard_score}hard/{result.schedule_a_soft_score}soft")
    print(f"Schedule {result.schedule_b_id}: {result.schedule_b_conflicts} conflicts, "
          f"{result.schedule_b_hard_score}hard/{result.schedule_b_soft_score}soft")
    print(f"\nRecommendation: {result.recommendation}")
    for reason in result.reasons:
        print(f"  - {reason}")
    print("=" * 80)


def main():
    parser = argparse.ArgumentParser(
        description='Schedule optimizer bridge - generate a master schedule with the external optimizer'
    )
    parser.add_argument(
        '--schedule-id',
        type=int,
        help='Schedule to generate'
    )
    parser.add_argument(
        '--mode',
        choices=[m.value for m in GenerationMode],
        default=GenerationMode.AI_ASSISTED.value,
        help='Generation mode (default: AI_ASSISTED)'
    )
    parser.add_argument(
        '--time-budget',
        type=int,
        help='Optimizer time budget in seconds'
    )
    parser.add_argument(
        '--compare',
        nargs=2,
        type=int,
        metavar=('SCHEDULE_A', 'SCHEDULE_B'),
        help='Compare two schedules instead of generating'
    )

    args = parser.parse_args()
    if args.schedule_id is None and not args.compare:
        parser.error("one of --schedule-id or --compare is required")

    setup_logging(LOG_LEVEL)

    print("\n" + "=" * 80)
    print("SCHEDULE OPTIMIZER BRIDGE")
    print("=" * 80)
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 80)

    service = build_default_service()
    try:
        if args.compare:
            print_comparison(service.reconciler.compare_schedules(*args.compare))
            return 0

        result = service.generate_schedule_ai(
            args.schedule_id,
            mode=GenerationMode(args.mode),
            time_budget_seconds=args.time_budget
        )
        print_generation(result)
        return 0 if result.success else 1

    except KeyboardInterrupt:
        print("\n\nGeneration interrupted by user.")
        return 1

    except LookupError as e:
        print(f"\nERROR: {e}")
        return 1

    finally:
        service.supervisor.stop()


if __name__ == '__main__':
    sys.exit(main())
