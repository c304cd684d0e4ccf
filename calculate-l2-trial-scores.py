#!/usr/bin/env python3

import sys

from l2_trial_scores.cli import main

if __name__ == "__main__":
    sys.exit(main())
