from pydantic import BaseModel

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

class Message(BaseModel):
    message: str
