"""sonar-feedback — SonarCloud analysis results for a pull request or a branch."""

__version__ = "1.0.0"
