"""Runtime bootstrap for the CFP web application.

The application is assembled in two steps. ``cfp.bootstrap.bootstrap`` resolves paths and loads
the environment's configuration into an immutable ``AppContainer``; ``cfp.factory.create_app``
then turns that container into a configured Flask application.
"""

__version__ = "1.0.0"
