"""Package logger used by the smearing engine and the command line."""

import logging
import sys

# Configure the formatting of the logger
logging.basicConfig(format="[%(levelname)s] %(message)s", stream=sys.stdout)

logger = logging.getLogger("ipsmear")
