"""Game logic, message models, game-log writing and AMQP publish/subscribe helpers for the Peril war game."""

__version__ = "0.1.0"

__all__ = ["console", "gamedata", "gamestate", "logs", "pubsub", "routing"]