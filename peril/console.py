"""Prompts, help text and flavour messages for the terminal."""

from __future__ import annotations

import random
import sys

from peril.gamestate import GameError

MALICIOUS_LOGS = (
    "Never interrupt your enemy when he is making a mistake.",
    "The hardest thing of all for a soldier is to retreat.",
    "A soldier will fight long and hard for a bit of colored ribbon.",
    "It is well that war is so terrible, otherwise we should grow too fond of it.",
    "The art of war is simple enough. Find out where your enemy is. Get at him as "
    "soon as you can. Strike him as hard as you can, and keep moving on.",
    "All warfare is based on deception.",
)

CLIENT_HELP = """Possible commands:
* move <location> <unitID> <unitID> <unitID>...
    example:
    move asia 1
* spawn <location> <rank>
    example:
    spawn europe infantry
* status
* spam <n>
    example:
    spam 5
* quit
* help"""

SERVER_HELP = """Possible commands:
* pause
* resume
* quit
* help"""

QUIT_MESSAGE = "I hate this game! (╯°□°)╯︵ ┻━┻"


def print_client_help() -> str:
    print(CLIENT_HELP)
    return CLIENT_HELP


def client_welcome() -> str:
    """Greet the player and ask for a username."""
    print("Welcome to the Peril client!")
    print("Please enter your username:")
    words = get_input()
    if not words:
        raise GameError("you must enter a username. goodbye")
    print(f"Welcome, {words[0]}!")
    print_client_help()
    return words[0]


def print_server_help() -> str:
    print(SERVER_HELP)
    return SERVER_HELP


def get_input() -> list[str]:
    """Prompt and read one line from standard input, split into words."""
    print("> ", end="", flush=True)
    return sys.stdin.readline().split()


def get_malicious_log() -> str:
    return random.choice(MALICIOUS_LOGS)


def print_quit() -> str:
    print(QUIT_MESSAGE)
    return QUIT_MESSAGE