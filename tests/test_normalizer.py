"""Unit tests for converting start.gg payloads into local records"""

import pytest

from bracketsync.models.bracket_set import BracketSet, SetState
from bracketsync.models.startgg_api import (
    StartGGCharacter,
    StartGGEvent,
    StartGGGame,
    StartGGPlayer,
    StartGGSet,
    StartGGSetDetail,
)
from bracketsync.sync.normalizer import (
    convert_characters,
    convert_games,
    convert_player,
    convert_set,
    convert_videogame,
)


@pytest.mark.unit
class TestConvertSet:
    """Test mapping raw set nodes"""

    def test_loaded_set_is_clean_and_collapsed(self, mock_event):
        event = StartGGEvent.model_validate(mock_event)
        bracket_set = convert_set(event.sets.nodes[0], convert_videogame(event.videogame))

        assert bracket_set.id == "70001"
        assert bracket_set.state == SetState.IN_PROGRESS
        assert bracket_set.entrant_ids == ("101", "102")
        assert bracket_set.slots[0].participants[0].player_id == "1001"
        assert bracket_set.slots[0].score == 2
        assert bracket_set.games == []
        assert bracket_set.is_dirty is False
        assert bracket_set.is_expanded is False
        assert bracket_set.is_loading_details is False
        assert len(bracket_set.videogame.characters) == 8

    def test_missing_entrant_becomes_tbd_slot(self, mock_event):
        event = StartGGEvent.model_validate(mock_event)
        bracket_set = convert_set(event.sets.nodes[3])

        assert bracket_set.slots[1].entrant_id is None
        assert bracket_set.slots[1].display_name == "TBD"
        assert bracket_set.has_resolved_entrants is False

    def test_slots_are_padded_to_two(self):
        bracket_set = convert_set(StartGGSet(id=1, state=1, slots=[]))

        assert len(bracket_set.slots) == 2
        assert bracket_set.entrant_ids == (None, None)

    def test_unknown_state_is_kept(self):
        bracket_set = convert_set(StartGGSet(id=5, state=6))

        assert bracket_set.state == 6
        assert bracket_set.state_label == "Unknown"

    def test_winner_not_among_entrants_is_dropped(self, mock_event):
        node = mock_event["sets"]["nodes"][2]
        node["winnerId"] = 999
        bracket_set = convert_set(StartGGSet.model_validate(node))

        assert bracket_set.winner_id is None

    def test_each_set_gets_its_own_videogame(self, mock_event):
        event = StartGGEvent.model_validate(mock_event)
        videogame = convert_videogame(event.videogame)
        first = convert_set(event.sets.nodes[0], videogame)
        second = convert_set(event.sets.nodes[1], videogame)

        first.videogame.characters.clear()
        assert len(second.videogame.characters) == 8


@pytest.mark.unit
class TestConvertGames:
    """Test mapping raw games onto the set's entrants"""

    def test_games_sorted_by_order_num(self, loaded_set, mock_set_details):
        detail = StartGGSetDetail.model_validate(mock_set_details)
        games = convert_games(detail.games, loaded_set)

        assert [game.order_num for game in games] == [1, 2, 3]
        assert [game.id for game in games] == ["9001", "9002", "9003"]
        assert games[1].winner_id == "102"

    def test_selections_matched_by_entrant_not_position(self, loaded_set):
        api_game = StartGGGame.model_validate(
            {
                "id": 1,
                "orderNum": 1,
                "selections": [
                    {"entrant": {"id": 102}, "character": {"id": 5, "name": "Falco"}},
                    {"entrant": {"id": 101}, "character": {"id": 6, "name": "Fox"}},
                ],
            }
        )
        games = convert_games([api_game], loaded_set)

        assert games[0].character_ids == ["6", "5"]

    def test_selection_of_unknown_entrant_ignored(self, loaded_set):
        api_game = StartGGGame.model_validate(
            {
                "id": 1,
                "orderNum": 1,
                "selections": [
                    {"entrant": {"id": 555}, "character": {"id": 5, "name": "Falco"}},
                    {"entrant": {"id": 102}, "character": None},
                ],
            }
        )
        games = convert_games([api_game], loaded_set)

        assert games[0].character_ids == [None, None]

    def test_equal_order_nums_keep_fetch_order(self, loaded_set):
        api_games = [
            StartGGGame(id="b", orderNum=2),
            StartGGGame(id="a", orderNum=1),
            StartGGGame(id="c", orderNum=2),
        ]
        games = convert_games(api_games, loaded_set)

        assert [game.id for game in games] == ["a", "b", "c"]

    def test_scores_and_stage_copied(self, loaded_set):
        api_game = StartGGGame.model_validate(
            {"id": 7, "orderNum": 1, "entrant1Score": 3, "entrant2Score": 0, "stage": {"id": 32}}
        )
        game = convert_games([api_game], loaded_set)[0]

        assert game.scores == [3, 0]
        assert game.stage_id == 32
        assert game.is_temporary is False

    def test_no_games(self, loaded_set):
        assert convert_games(None, loaded_set) == []


@pytest.mark.unit
class TestConvertCharactersAndPlayers:
    def test_first_image_becomes_image_url(self):
        characters = convert_characters(
            [
                StartGGCharacter.model_validate(
                    {
                        "id": 6,
                        "name": "Fox",
                        "images": [{"url": "first.png"}, {"url": "second.png"}],
                    }
                ),
                StartGGCharacter(id=5, name="Falco"),
            ]
        )

        assert characters[0].id == "6"
        assert characters[0].image_url == "first.png"
        assert characters[1].image_url is None

    def test_player_prefers_profile_image(self):
        player = convert_player(
            StartGGPlayer.model_validate(
                {
                    "id": 1001,
                    "gamerTag": "Alice",
                    "prefix": "TSM",
                    "user": {
                        "images": [
                            {"url": "banner.png", "type": "banner"},
                            {"url": "profile.png", "type": "profile"},
                        ]
                    },
                }
            )
        )

        assert player.id == "1001"
        assert player.image_url == "profile.png"
        assert player.display_name == "TSM | Alice"

    def test_player_without_user_has_no_image(self):
        player = convert_player(StartGGPlayer(id=3, gamerTag="Bob"))

        assert player.image_url is None
        assert player.initials == "BO"


@pytest.mark.unit
class TestBracketSetHelpers:
    def test_match_score_and_winner(self, mock_event):
        bracket_set = convert_set(StartGGSet.model_validate(mock_event["sets"]["nodes"][2]))

        assert bracket_set.match_score == "3 - 0"
        assert bracket_set.winner_name == "Eve"
        assert bracket_set.state_label == "Complete"
        assert bracket_set.url == "https://start.gg/set/70003"

    def test_match_score_for_pending_set(self):
        bracket_set = BracketSet(id="1", state=1)

        assert bracket_set.match_score == "Upcoming"
        assert bracket_set.match_name == "TBD vs TBD"

    def test_dictionary_style_access(self, loaded_set):
        assert loaded_set["id"] == "70001"
        assert loaded_set.get("missing", "default") == "default"
