"""Service layer: document store, grading model, grading workflow and record services."""
