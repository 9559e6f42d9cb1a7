"""
Database Schemas

MongoDB collection schemas as Pydantic models. These are used to validate
request payloads before anything reaches the database.

Model name is converted to lowercase for the collection name:
- Blog -> "blog" collection
- User -> "user" collection
- Person -> "person" collection
"""

from pydantic import BaseModel, Field
from typing import Optional


class Blog(BaseModel):
    """
    Blogs collection schema
    Collection name: "blog"
    """
    title: str = Field(..., min_length=1, description="Blog title")
    author: Optional[str] = Field(None, description="Author name")
    url: str = Field(..., min_length=1, description="Link to the blog")
    likes: int = Field(0, ge=0, description="Number of likes")


class BlogUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = None
    url: Optional[str] = Field(None, min_length=1)
    likes: Optional[int] = Field(None, ge=0)


class UserCreate(BaseModel):
    """
    Users collection payload. Only the hash of ``password`` is stored,
    in the "user" collection as ``password_hash``.
    """
    username: str = Field(..., min_length=1, description="Unique login name")
    name: Optional[str] = Field(None, description="Full name")
    password: str = Field(..., min_length=1, description="Plaintext password")


class Person(BaseModel):
    """
    Phonebook entries
    Collection name: "person"
    """
    name: str = Field(..., min_length=1, description="Contact name, unique")
    number: str = Field(..., min_length=1, description="Phone number")


class PersonUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    number: Optional[str] = Field(None, min_length=1)
