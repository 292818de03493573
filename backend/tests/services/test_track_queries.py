"""Track Read Models — tests for listings, favorites, and comment order."""

from soundlike.models import Comment, Like
from soundlike.services import track_queries
from soundlike.services.track_queries import LISTING_LIMIT


async def test_listing_newest_first_with_like_state(db, make_track, add_rows):
    older = await make_track(title="Older")
    newer = await make_track(title="Newer")
    await add_rows(
        Like(user_uid="me", track_id=older.id),
        Like(user_uid="other", track_id=older.id),
    )

    async with db.session() as session:
        views = await track_queries.list_tracks(session, caller_uid="me")

    assert [v.id for v in views] == [newer.id, older.id]
    assert (views[1].likes_count, views[1].is_liked) == (2, True)
    assert (views[0].likes_count, views[0].is_liked) == (0, False)


async def test_anonymous_listing_never_liked(db, make_track, add_rows):
    track = await make_track()
    await add_rows(Like(user_uid="me", track_id=track.id))

    async with db.session() as session:
        views = await track_queries.list_tracks(session)

    assert views[0].likes_count == 1
    assert views[0].is_liked is False


async def test_listing_filtered_by_uploader(db, make_track):
    await make_track(uploader_uid="a", uploader_name="A")
    mine = await make_track(uploader_uid="b", uploader_name="B")

    async with db.session() as session:
        views = await track_queries.list_tracks(session, uploader_uid="b")

    assert [v.id for v in views] == [mine.id]


async def test_listing_is_capped(db, add_rows):
    from soundlike.models import Track

    await add_rows(*(
        Track(filename=f"{i:032x}.mp3", title=f"T{i}", uploader_uid="u")
        for i in range(LISTING_LIMIT + 5)
    ))
    async with db.session() as session:
        views = await track_queries.list_tracks(session)
    assert len(views) == LISTING_LIMIT


async def test_favorites_only_liked_tracks(db, make_track, add_rows):
    liked = await make_track(title="Liked")
    await make_track(title="Ignored")
    await add_rows(Like(user_uid="me", track_id=liked.id))

    async with db.session() as session:
        views = await track_queries.list_favorites(session, "me")

    assert [v.title for v in views] == ["Liked"]
    assert views[0].is_liked is True


async def test_comments_oldest_first(db, make_track, add_rows):
    track = await make_track()
    await add_rows(Comment(track_id=track.id, user_uid="a", user_name="A", content="first"))
    await add_rows(Comment(track_id=track.id, user_uid="b", user_name="B", content="second"))

    async with db.session() as session:
        comments = await track_queries.list_comments(session, track.id)

    assert [c.content for c in comments] == ["first", "second"]
