from app.services import catalog as catalog_service
from app.services.votes import Reactions, VoterSet, next_vote_count


# ----------------------
# 🔹 VoterSet
# ----------------------
def test_voter_set_toggle_adds_then_removes():
    voters = VoterSet([1, 2])

    assert voters.toggle(3) is True
    assert 3 in voters
    assert voters.toggle(3) is False
    assert 3 not in voters
    assert voters.to_list() == [1, 2]


def test_voter_set_ignores_duplicates_in_stored_list():
    voters = VoterSet([5, 5, 2])
    assert len(voters) == 2
    assert voters.to_list() == [2, 5]


def test_next_vote_count_never_goes_negative():
    assert next_vote_count(0, added=False) == 0
    assert next_vote_count(4, added=False) == 3
    assert next_vote_count(4, added=True) == 5


# ----------------------
# 🔹 Reactions
# ----------------------
def test_reaction_toggle_is_self_inverse():
    reactions = Reactions({"🔥": [1]})

    assert reactions.toggle("🔥", 2) is True
    assert reactions.users("🔥") == {1, 2}
    assert reactions.toggle("🔥", 2) is False
    assert reactions.to_dict() == {"🔥": [1]}


def test_reaction_drops_emoji_without_users():
    reactions = Reactions({"🍺": [7]})
    reactions.toggle("🍺", 7)
    assert reactions.to_dict() == {}


def test_reactions_skip_empty_entries_from_storage():
    assert Reactions({"👍": []}).to_dict() == {}


# ----------------------
# 🔹 Voting for suggested drinks
# ----------------------
async def test_vote_for_drink_twice_restores_original_state(session, make_spot, user, admin):
    spot = await make_spot()
    drink = await catalog_service.create_drink(session, spot.id, "Jameson", suggested_by=admin.id)
    original_votes, original_voters = drink.votes, list(drink.voted_by)

    voted = await catalog_service.vote_for_drink(session, drink.id, user.id)
    assert voted.votes == original_votes + 1
    assert user.id in voted.voted_by

    unvoted = await catalog_service.vote_for_drink(session, drink.id, user.id)
    assert unvoted.votes == original_votes
    assert unvoted.voted_by == original_voters


async def test_drinks_are_listed_by_votes(session, make_spot, user, admin):
    spot = await make_spot()
    first = await catalog_service.create_drink(session, spot.id, "Beer", suggested_by=admin.id)
    second = await catalog_service.create_drink(session, spot.id, "Rum", suggested_by=user.id)

    await catalog_service.vote_for_drink(session, second.id, user.id)

    drinks = await catalog_service.get_drinks(session, spot.id)
    assert [d.id for d in drinks] == [second.id, first.id]
