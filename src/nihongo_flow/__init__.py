"""nihongo-flow: local-first Japanese study cards with a simple SRS loop."""

from nihongo_flow.consts import VERSION

__version__ = VERSION
