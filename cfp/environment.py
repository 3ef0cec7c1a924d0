"""The environment identity the application is running under."""

from enum import Enum

from cfp.constants import env_names


class Environment(Enum):
    """One of the three environments the application knows how to run in.

    Members compare by their logical name: ``Environment("production")`` and
    ``Environment.from_name("Production")`` are both ``Environment.PRODUCTION``.
    """

    PRODUCTION = env_names.PRODUCTION
    DEVELOPMENT = env_names.DEVELOPMENT
    TESTING = env_names.TESTING

    @classmethod
    def from_name(cls, name: str) -> "Environment":
        """Look up an environment by name, ignoring case and surrounding whitespace.

        Raises:
            ValueError: The name is not one of production, development or testing.
        """

        try:
            return cls(str(name).strip().lower())
        except ValueError:
            known = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown environment {name!r}. Expected one of: {known}") from None

    def equals(self, other) -> bool:
        """Compare by logical name. `other` may be an Environment or a bare name."""

        other_name = other.value if isinstance(other, Environment) else other
        return self.value == other_name

    def __str__(self) -> str:
        return self.value
