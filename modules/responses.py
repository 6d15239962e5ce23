"""
============================================================================
CANNED RESPONSES
============================================================================
Fixed response pools for the fun commands. Every picker takes the random
source so commands and tests can share the same logic.
"""

import random

import config

EIGHT_BALL_RESPONSES = [
    '🎱 It is certain.',
    '🎱 Without a doubt.',
    '🎱 Yes, definitely.',
    '🎱 You may rely on it.',
    '🎱 As I see it, yes.',
    '🎱 Most likely.',
    '🎱 Outlook good.',
    '🎱 Yes.',
    '🎱 Signs point to yes.',
    '🎱 Reply hazy, try again.',
    '🎱 Ask again later.',
    '🎱 Better not tell you now.',
    '🎱 Cannot predict now.',
    '🎱 Concentrate and ask again.',
    "🎱 Don't count on it.",
    '🎱 My reply is no.',
    '🎱 My sources say no.',
    '🎱 Outlook not so good.',
    '🎱 Very doubtful.',
]

JOKES = [
    'Why do programmers prefer dark mode? Because light attracts bugs! 🐛',
    'Why did the developer go broke? Because he used up all his cache! 💰',
    "How many programmers does it take to change a light bulb? None, that's a hardware problem! 💡",
    "Why do Java developers wear glasses? Because they don't C#! 👓",
    "What's a programmer's favorite hangout place? Foo Bar! 🍺",
    'Why did the function break up with the variable? Because it had too many arguments! 💔',
    'What do you call a programmer from Finland? Nerdic! 🇫🇮',
    "Why did the programmer quit his job? Because he didn't get arrays! 📊",
]

QUOTES = [
    '"The only way to do great work is to love what you do." - Steve Jobs',
    '"Code is like humor. When you have to explain it, it\'s bad." - Cory House',
    '"First, solve the problem. Then, write the code." - John Johnson',
    '"Experience is the name everyone gives to their mistakes." - Oscar Wilde',
    '"In order to be irreplaceable, one must always be different." - Coco Chanel',
    '"Java is to JavaScript what car is to Carpet." - Chris Heilmann',
    '"Knowledge is power." - Francis Bacon',
    '"Sometimes it pays to stay in bed on Monday, rather than spending the rest '
    'of the week debugging Monday\'s code." - Dan Salomon',
    '"Perfection is achieved not when there is nothing more to add, but rather '
    'when there is nothing more to take away." - Antoine de Saint-Exupery',
    '"Talk is cheap. Show me the code." - Linus Torvalds',
]


def eight_ball(question: str, rng: random.Random) -> str:
    return f"**Question:** {question}\n{rng.choice(EIGHT_BALL_RESPONSES)}"


def joke(rng: random.Random) -> str:
    return rng.choice(JOKES)


def quote(rng: random.Random) -> str:
    return f"💭 {rng.choice(QUOTES)}"


def coinflip(rng: random.Random) -> str:
    result = 'Heads' if rng.random() < 0.5 else 'Tails'
    return f"🪙 The coin landed on: **{result}**!"


def valid_dice_sides(sides: int) -> bool:
    return config.DICE_MIN_SIDES <= sides <= config.DICE_MAX_SIDES


def roll_dice(sides: int, rng: random.Random) -> str:
    """
    Roll a die with the given number of sides.

    Raises:
        ValueError: sides outside the configured range
    """
    if not valid_dice_sides(sides):
        raise ValueError(
            f"sides must be between {config.DICE_MIN_SIDES} and {config.DICE_MAX_SIDES}"
        )
    result = rng.randint(1, sides)
    return f"🎲 You rolled a **{result}** (1-{sides})"
