"""Convert validated start.gg payloads into local, editable records.

Everything past this module works on the records of ``models.bracket_set``;
raw ``StartGG*`` models never leave it.
"""

from ..models.bracket_set import (
    BracketSet,
    Character,
    Game,
    Participant,
    PlayerInfo,
    Slot,
    Videogame,
)
from ..models.startgg_api import (
    StartGGCharacter,
    StartGGGame,
    StartGGImage,
    StartGGPlayer,
    StartGGSet,
    StartGGSlot,
    StartGGVideogame,
)
from ..utils.logging import log


def _first_image_url(images: list[StartGGImage] | None) -> str | None:
    return images[0].url if images else None


def convert_characters(api_characters: list[StartGGCharacter] | None) -> list[Character]:
    return [
        Character(
            id=character.id,
            name=character.name,
            image_url=_first_image_url(character.images),
        )
        for character in api_characters or []
    ]


def convert_videogame(api_videogame: StartGGVideogame | None) -> Videogame:
    if api_videogame is None:
        return Videogame()
    return Videogame(
        id=api_videogame.id,
        name=api_videogame.displayName or api_videogame.name,
        characters=convert_characters(api_videogame.characters),
    )


def convert_slot(api_slot: StartGGSlot) -> Slot:
    entrant = api_slot.entrant
    if entrant is None or entrant.id is None:
        return Slot()

    participants = []
    for participant in entrant.participants or []:
        player = participant.player
        participants.append(
            Participant(
                id=participant.id,
                player_id=player.id if player else None,
                gamer_tag=(player.gamerTag if player else None)
                or participant.gamerTag
                or "Unknown",
                prefix=player.prefix if player else None,
            )
        )

    score = None
    standing = api_slot.standing
    if standing and standing.stats and standing.stats.score:
        value = standing.stats.score.value
        score = int(value) if value is not None else None

    return Slot(
        entrant_id=entrant.id,
        entrant_name=entrant.name,
        participants=participants,
        score=score,
    )


def convert_slots(api_slots: list[StartGGSlot] | None) -> list[Slot]:
    """Always two slots; missing ones are unresolved (TBD)"""
    slots = [convert_slot(api_slot) for api_slot in (api_slots or [])[:2]]
    while len(slots) < 2:
        slots.append(Slot())
    return slots


def convert_set(api_set: StartGGSet, videogame: Videogame | None = None) -> BracketSet:
    """Map a raw set node to a freshly loaded, collapsed, clean BracketSet"""
    slots = convert_slots(api_set.slots)
    entrant_ids = {slot.entrant_id for slot in slots if slot.entrant_id}

    winner_id = api_set.winnerId
    if winner_id is not None and winner_id not in entrant_ids:
        log(f"⚠️  Set {api_set.id}: winner {winner_id} is not one of its entrants, ignoring")
        winner_id = None

    return BracketSet(
        id=api_set.id,
        state=api_set.state if api_set.state is not None else 0,
        round=api_set.round,
        winner_id=winner_id,
        total_games=api_set.totalGames,
        started_at=api_set.startedAt,
        slots=slots,
        videogame=videogame.model_copy(deep=True) if videogame else Videogame(),
        games=[],
        is_expanded=False,
        is_dirty=False,
        is_loading_details=False,
    )


def convert_games(api_games: list[StartGGGame] | None, bracket_set: BracketSet) -> list[Game]:
    """Map raw games onto the set's two entrant positions, ordered by orderNum.

    Character selections are placed by matching each selection's entrant id
    against the set's entrants, regardless of the order they arrive in.
    """
    entrant1_id, entrant2_id = bracket_set.entrant_ids
    games: list[Game] = []

    for api_game in api_games or []:
        character_ids: list[str | None] = [None, None]
        for selection in api_game.selections or []:
            if not selection.entrant or not selection.character:
                continue
            if selection.entrant.id == entrant1_id:
                character_ids[0] = selection.character.id
            elif selection.entrant.id == entrant2_id:
                character_ids[1] = selection.character.id

        winner_id = api_game.winnerId
        if winner_id is not None and winner_id not in (entrant1_id, entrant2_id):
            log(f"⚠️  Game {api_game.id}: winner {winner_id} is not an entrant of set {bracket_set.id}")
            winner_id = None

        games.append(
            Game(
                id=api_game.id,
                order_num=api_game.orderNum,
                winner_id=winner_id,
                stage_id=api_game.stage.id if api_game.stage else None,
                scores=[api_game.entrant1Score, api_game.entrant2Score],
                character_ids=character_ids,
            )
        )

    # sorted() is stable, so equal orderNums keep fetch order
    return sorted(games, key=lambda game: game.order_num)


def player_image_url(api_player: StartGGPlayer) -> str | None:
    """Prefer the profile picture, otherwise the first image of the user"""
    images = api_player.user.images if api_player.user else None
    for image in images or []:
        if image.type == "profile":
            return image.url
    return _first_image_url(images)


def convert_player(api_player: StartGGPlayer) -> PlayerInfo:
    return PlayerInfo(
        id=api_player.id,
        gamer_tag=api_player.gamerTag or "Unknown",
        prefix=api_player.prefix,
        image_url=player_image_url(api_player),
    )
