import json
import argparse
import logging
import sys

from dotenv import load_dotenv

from application.exceptions import WorkoutServiceError
from backend.container import get_parse_workout_use_case
from domain.models import WeightUnit


def main():
    parser = argparse.ArgumentParser(description="Parse free-form workout text into a structured workout")
    parser.add_argument("input", nargs="?", help="Input text file path (default: stdin)")
    parser.add_argument("-o", "--output", help="Output JSON file path (default: stdout)")
    parser.add_argument("--date", help="Workout date YYYY-MM-DD (default: today)")
    parser.add_argument(
        "--weight-unit",
        choices=[u.value for u in WeightUnit],
        default=WeightUnit.LBS.value,
        help="Default weight unit (default: lbs)",
    )
    parser.add_argument("--user-id", help="Owning user id")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        # Load input text
        if args.input:
            with open(args.input, 'r') as f:
                text = f.read()
        else:
            text = sys.stdin.read()

        result = get_parse_workout_use_case().execute(
            text,
            date=args.date,
            weight_unit=WeightUnit(args.weight_unit),
            user_id=args.user_id,
        )
        output = json.dumps(result.workout.to_json_dict(), indent=2)

        # Output result
        if args.output:
            with open(args.output, 'w') as f:
                f.write(output)
        else:
            print(output)

        if result.usage is not None:
            print(
                f"Tokens: {result.usage.input_tokens} in / {result.usage.output_tokens} out",
                file=sys.stderr,
            )

    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    except WorkoutServiceError as e:
        print(f"Error ({e.status_code}): {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
