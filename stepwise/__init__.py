"""
Stepwise: adaptive practice engine.

Drives short practice sessions over small items (words, arithmetic facts,
quiz questions) until each one is mastered, then rotates in fresh content and
unlocks harder complexity levels as the learner progresses.

Subpackages:
- core: data model, mastery state machine, subject registry, errors
- study: bucketer, progressor, orchestrator, guidance, practice service
- content: question-bank catalog
- delivery: profile persistence and the terminal CLI
"""

__version__ = "1.0.0"
