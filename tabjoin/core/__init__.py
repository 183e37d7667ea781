"""Core data model, configuration, results and the pipeline driver."""
