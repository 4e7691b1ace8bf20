"""One module per metric group fetched from SonarCloud."""
