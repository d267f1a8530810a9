"""
Offline training report for one user.

Fits the wave size and quality trees on the user's ratings, prints the
accuracy on those same rows and a JSON snapshot of both trees. Useful for
checking whether a surfer's ratings separate at all before trusting the
predictions built from them.

Usage:
    swellcast-train <userId>
"""

import argparse
import json
import logging
import sys

from swellcast.config import production
from swellcast.surf_model import predictor

logger = logging.getLogger(__name__)


def format_report(report):
    """Render a training report as console text."""
    lines = [
        f"Samples used: {report['samplesUsed']}",
        f"Quality accuracy: {report['qualityAccuracy'] * 100:.1f}%",
        f"Wave size accuracy: {report['waveSizeAccuracy'] * 100:.1f}%",
        "Decision tree snapshot:",
        json.dumps({
            'qualityTree': report['treeSnapshot']['qualityTree'],
            'waveSizeTree': report['treeSnapshot']['waveSizeTree']
        }, indent=2)
    ]
    return '\n'.join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Train and report on one user\'s surf classifiers')
    parser.add_argument('user_id', help='User whose ratings are used')
    args = parser.parse_args(argv)

    logging.basicConfig(level=production.LOG_LEVEL, format=production.LOG_FORMAT)

    try:
        report = predictor.train_and_report_for_user(args.user_id)
    except Exception as e:
        logger.error(f"Training failed: {e}", exc_info=True)
        print(f"Training failed: {e}", file=sys.stderr)
        return 1

    print(format_report(report))
    print("Training complete")
    return 0


if __name__ == '__main__':
    sys.exit(main())
