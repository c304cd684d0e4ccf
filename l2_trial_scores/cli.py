import argparse
import sys
import traceback

from l2_trial_scores.config import constants
from l2_trial_scores.driver import calculate_scores
from l2_trial_scores.errors import SnapshotError


def build_parser():
    parser = argparse.ArgumentParser(
        description="Calculates L2 trial scores and outputs them in a JSON file"
    )
    parser.add_argument("--output-file", help="The json file where all output will be stored")
    parser.add_argument("--provider-url", help="The http provider to use for communicating with the blockchain")
    parser.add_argument("--network", default=constants.NETWORK, help="Network whose deployments are scanned")
    parser.add_argument("--deployment-dir", default=constants.DEPLOYMENT_DIR, help="Synthetix publish/deployed directory")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        calculate_scores(
            output_file=args.output_file,
            provider_url=args.provider_url,
            network=args.network,
            deployment_dir=args.deployment_dir,
        )
    except SnapshotError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
