"""
Genre list catalogue.

Every user has one ranked list per entry of LIST_LABELS. TMDB genre names
are routed onto those lists through GENRE_LIST_MAP.
"""

LIST_LABELS: dict[str, str] = {
    "all-time": "All-Time",
    "actors": "Actors",
    "watchlist": "Watchlist",
    "action": "Action",
    "comedy": "Comedy",
    "drama": "Drama",
    "horror": "Horror",
    "scifi": "Sci-Fi",
    "animation": "Animation",
    "romance": "Romance",
    "thriller": "Thriller",
    "documentary": "Documentary",
}

# TMDB genre name -> list id. Several TMDB genres fold into one list.
GENRE_LIST_MAP: dict[str, str] = {
    "Action": "action",
    "Adventure": "action",
    "War": "action",
    "Animation": "animation",
    "Comedy": "comedy",
    "Drama": "drama",
    "Horror": "horror",
    "Science Fiction": "scifi",
    "Fantasy": "scifi",
    "Romance": "romance",
    "Thriller": "thriller",
    "Crime": "thriller",
    "Mystery": "thriller",
    "Documentary": "documentary",
}


def lists_for_genres(genre_names: list[str]) -> list[str]:
    """Return the genre list ids a movie belongs to, deduped, in input order."""
    list_ids: list[str] = []
    for name in genre_names:
        list_id = GENRE_LIST_MAP.get(name.strip())
        if list_id and list_id not in list_ids:
            list_ids.append(list_id)
    return list_ids
