import math
from typing import Tuple, List

from sqlalchemy.orm import Query

MAX_LIMIT = 100


def paginate(query: Query, page: int, limit: int) -> Tuple[List, dict]:
    # count avant offset/limit
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit)
    }
