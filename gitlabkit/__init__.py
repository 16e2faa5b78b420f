"""gitlabkit - Self-hosted GitLab deployment generator."""

__version__ = "0.1.0"
__author__ = "gitlabkit maintainers"
