"""
Career statistics for a person, computed from their catalog credits.
"""
from typing import Any

from app.schemas.people import Credit

ROLES = ("Actor", "Director", "Producer")

GENRE_NAMES: dict[int, str] = {
    28: "Action", 12: "Adventure", 16: "Animation", 35: "Comedy", 80: "Crime",
    99: "Documentary", 18: "Drama", 10751: "Family", 14: "Fantasy", 36: "History",
    27: "Horror", 10402: "Music", 9648: "Mystery", 10749: "Romance", 878: "Sci-Fi",
    10770: "TV Movie", 53: "Thriller", 10752: "War", 37: "Western",
}


def format_money(amount: int | float | None) -> str:
    """$1.2B / $3.4M / $12,345 / $0."""
    if not amount:
        return "$0"
    if amount >= 1_000_000_000:
        return f"${amount / 1_000_000_000:.1f}B"
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.1f}M"
    return f"${amount:,.0f}"


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _release_year(credit: Credit) -> int | None:
    if not credit.release_date:
        return None
    head = credit.release_date[:4]
    return int(head) if head.isdigit() else None


def compute_career_stats(movie_credits: list[Credit], tv_credits: list[Credit]) -> dict[str, Any]:
    """
    Aggregate a filmography into a dict matching CareerStatsResponse.

    Credits without a roles list count as acting credits but add nothing
    to the actor box office. The genre breakdown only looks at credits in
    the person's most frequent role. Ties go to the later role and, among
    genres, to the lower genre id.
    """
    rated = [c for c in movie_credits if c.vote_average > 0]
    avg_rating = round(sum(c.vote_average for c in rated) / len(rated), 1) if rated else None

    highest_rated = None
    for credit in rated:
        # later credits win ties
        if highest_rated is None or not highest_rated.vote_average > credit.vote_average:
            highest_rated = credit

    years = [y for y in (_release_year(c) for c in movie_credits) if y is not None]
    start_year = min(years) if years else None

    revenue_by_role = dict.fromkeys(ROLES, 0)
    role_counts = dict.fromkeys(ROLES, 0)
    total_revenue = 0
    for credit in movie_credits:
        revenue = credit.revenue or 0
        total_revenue += revenue
        for role in credit.roles or ():
            revenue_by_role[role] += revenue
            role_counts[role] += 1
        # uncredited cast entries count towards acting but carry no revenue
        if credit.roles is None:
            role_counts["Actor"] += 1

    # ties go to the later role in ROLES
    favoured_role = ROLES[0]
    for role in ROLES[1:]:
        if not role_counts[favoured_role] > role_counts[role]:
            favoured_role = role

    genre_counts: dict[int, int] = {}
    for credit in movie_credits:
        credit_roles = ["Actor"] if credit.roles is None else credit.roles
        if favoured_role not in credit_roles:
            continue
        for genre_id in credit.genre_ids:
            if genre_id in GENRE_NAMES:
                genre_counts[genre_id] = genre_counts.get(genre_id, 0) + 1
    total_genres = sum(genre_counts.values())

    genres = [
        {
            "id": genre_id,
            "name": GENRE_NAMES[genre_id],
            "count": count,
            "percentage": _round_half_up(count / total_genres * 100) if total_genres else 0,
        }
        for genre_id, count in sorted(genre_counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]

    return {
        "avg_rating": avg_rating,
        "total_films": len(movie_credits),
        "total_series": len(tv_credits),
        "highest_rated": highest_rated,
        "start_year": start_year,
        "years_active": f"{start_year} - Present" if start_year is not None else None,
        "total_box_office": format_money(total_revenue),
        "box_office_breakdown": {
            "actor": format_money(revenue_by_role["Actor"]),
            "director": format_money(revenue_by_role["Director"]),
            "producer": format_money(revenue_by_role["Producer"]),
            "has_director": revenue_by_role["Director"] > 0,
            "has_producer": revenue_by_role["Producer"] > 0,
        },
        "most_favoured_role": favoured_role,
        "genres": genres,
        "top_genre": genres[0]["name"] if genres else None,
    }
