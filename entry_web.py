"""Deployable Flask application instance.

The sole purpose of this file is to contain the Flask instance that will be run when the web
server is deployed. No other modules should import this one in order to prevent deployable
application instances from being created when they are not needed (e.g. during testing).

Point ``flask`` at it with ``FLASK_APP=entry_web``. The environment identity is read from
``CFP_ENV`` (default: development) and the installation root from ``CFP_BASE_PATH`` (default: the
working directory). Both may also be set in a .env file in the working directory.
"""

import os
import sys

from dotenv import load_dotenv

from cfp.bootstrap import bootstrap
from cfp.constants import env_names
from cfp.environment import Environment
from cfp.factory import create_app
from cfp.utils.logs import cfp_logger

load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env"))

try:
    environment = Environment.from_name(os.environ.get("CFP_ENV", env_names.DEVELOPMENT))
except ValueError as e:
    cfp_logger.fatal(str(e))
    sys.exit(1)

result = bootstrap(os.environ.get("CFP_BASE_PATH", os.getcwd()), environment)

# Nothing is served unless the bootstrap succeeded.
if not result.ok:
    cfp_logger.fatal(f"Could not bootstrap the application: {result.error}")
    sys.exit(1)

app = create_app(result.container)
