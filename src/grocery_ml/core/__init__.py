"""
Core Package
============

Domain logic for dataset validation, synthetic training, model artifact
generation, model persistence, storage analytics, and archive export.

Modules:
    - validation: Training dataset validation rules
    - executor: Epoch count selection and the synthetic epoch loop
    - artifacts: Topology, weights, manifest, metadata, and readme generation
    - model_store: Directory-backed bundle persistence
    - analytics: Storage size and count aggregation
    - archive: ZIP packaging of stored bundles
    - datasets: Loading datasets from JSON files or class directories
    - config: TOML configuration cascade
    - logger: Package logging setup
"""
