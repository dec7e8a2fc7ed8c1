"""
Test Fixtures - Sample Configurations.

    - sample_config.yaml: Pipeline configuration for loader tests
    - profiles/strict.yaml: Profile merged over the sample
"""
