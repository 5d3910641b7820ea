"""Mock start.gg payloads for testing and demo purposes."""

from typing import Any, Dict

# Fixed timestamp for consistent testing: Jan 1, 2022 00:00:00 UTC
MOCK_BASE_TIME = 1640995200


def _character(character_id: int, name: str) -> Dict[str, Any]:
    return {
        "id": character_id,
        "name": name,
        "images": [
            {"url": f"https://images.start.gg/characters/{character_id}.png", "type": "stockIcon"}
        ],
    }


MOCK_CHARACTERS = [
    _character(1, "Bowser"),
    _character(2, "Captain Falcon"),
    _character(3, "Donkey Kong"),
    _character(4, "Dr. Mario"),
    _character(5, "Falco"),
    _character(6, "Fox"),
    _character(7, "Ganondorf"),
    _character(8, "Ice Climbers"),
]

MOCK_VIDEOGAME: Dict[str, Any] = {
    "id": 1,
    "name": "Super Smash Bros. Melee",
    "slug": "melee",
    "displayName": "Melee",
    "characters": MOCK_CHARACTERS,
}


def _slot(entrant_id: int, tag: str, player_id: int, score: int | None = None) -> Dict[str, Any]:
    return {
        "id": f"slot-{entrant_id}",
        "entrant": {
            "id": entrant_id,
            "name": tag,
            "participants": [
                {"id": player_id * 10, "player": {"id": player_id, "gamerTag": tag, "prefix": None}}
            ],
        },
        "standing": {"stats": {"score": {"value": score}}},
    }


# Raw `event` payload as returned by the event sets query
MOCK_EVENT: Dict[str, Any] = {
    "id": 864209,
    "name": "Melee Singles",
    "tournament": {"id": 555, "name": "Summer Showdown 2025"},
    "videogame": MOCK_VIDEOGAME,
    "sets": {
        "nodes": [
            {
                "id": 70001,
                "state": 2,
                "round": 1,
                "winnerId": None,
                "totalGames": 5,
                "startedAt": MOCK_BASE_TIME - 300,
                "slots": [_slot(101, "Alice", 1001, 2), _slot(102, "Bob", 1002, 1)],
            },
            {
                "id": 70002,
                "state": 1,
                "round": 1,
                "winnerId": None,
                "totalGames": 5,
                "startedAt": None,
                "slots": [_slot(103, "Charlie", 1003), _slot(104, "Dave", 1004)],
            },
            {
                "id": 70003,
                "state": 3,
                "round": 2,
                "winnerId": 105,
                "totalGames": 5,
                "startedAt": MOCK_BASE_TIME - 1800,
                "slots": [_slot(105, "Eve", 1005, 3), _slot(106, "Frank", 1006, 0)],
            },
            {
                "id": 70004,
                "state": 1,
                "round": 3,
                "winnerId": None,
                "totalGames": 5,
                "startedAt": None,
                "slots": [_slot(105, "Eve", 1005), {"id": "slot-empty", "entrant": None}],
            },
        ]
    },
}


def _game(game_id: int, order_num: int, winner_id: int, picks: tuple[int, int]) -> Dict[str, Any]:
    return {
        "id": game_id,
        "orderNum": order_num,
        "winnerId": winner_id,
        "entrant1Score": None,
        "entrant2Score": None,
        "selections": [
            {"entrant": {"id": 101}, "character": MOCK_CHARACTERS[picks[0] - 1]},
            {"entrant": {"id": 102}, "character": MOCK_CHARACTERS[picks[1] - 1]},
        ],
    }


# Raw `set` payload as returned by the set details query for set 70001
MOCK_SET_DETAILS: Dict[str, Any] = {
    "id": 70001,
    "state": 2,
    "games": [
        _game(9003, 3, 101, (6, 5)),
        _game(9001, 1, 101, (6, 5)),
        _game(9002, 2, 102, (6, 2)),
    ],
    "event": {"videogame": MOCK_VIDEOGAME},
}
