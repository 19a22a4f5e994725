from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
	pass


class Portal(Base):
	__tablename__ = "portals"

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	description: Mapped[str] = mapped_column(String(100))

	publications: Mapped[List["Publication"]] = relationship(back_populates="portal")


class Author(Base):
	__tablename__ = "authors"

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	name: Mapped[str] = mapped_column(String(500), index=True)

	publication_links: Mapped[List["PublicationAuthor"]] = relationship(back_populates="author")


class Category(Base):
	__tablename__ = "categories"

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	category_name: Mapped[str] = mapped_column(String(255), index=True)

	publication_links: Mapped[List["PublicationCategory"]] = relationship(back_populates="category")


class Publication(Base):
	__tablename__ = "publications"

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	doi: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
	title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
	abstract: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
	publication_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
	publication_month: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
	publication_day: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
	issn: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
	pdf_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
	pdf_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
	pages: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # page count as text

	portal_id: Mapped[int] = mapped_column(ForeignKey("portals.id"))
	portal: Mapped[Portal] = relationship(back_populates="publications")

	author_links: Mapped[List["PublicationAuthor"]] = relationship(
		back_populates="publication", cascade="all, delete-orphan"
	)
	category_links: Mapped[List["PublicationCategory"]] = relationship(
		back_populates="publication", cascade="all, delete-orphan"
	)
	results: Mapped[List["Result"]] = relationship(
		back_populates="publication", cascade="all, delete-orphan"
	)


class PublicationAuthor(Base):
	__tablename__ = "publications_authors"

	publication_id: Mapped[int] = mapped_column(ForeignKey("publications.id"), primary_key=True)
	author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"), primary_key=True)

	publication: Mapped[Publication] = relationship(back_populates="author_links")
	author: Mapped[Author] = relationship(back_populates="publication_links")


class PublicationCategory(Base):
	__tablename__ = "publications_categories"

	publication_id: Mapped[int] = mapped_column(ForeignKey("publications.id"), primary_key=True)
	category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), primary_key=True)
	quartile: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)  # Q1..Q4

	publication: Mapped[Publication] = relationship(back_populates="category_links")
	category: Mapped[Category] = relationship(back_populates="publication_links")


class Search(Base):
	__tablename__ = "searches"

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	query_text: Mapped[str] = mapped_column(Text, default="")
	start_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
	search_date: Mapped[datetime] = mapped_column(DateTime)

	results: Mapped[List["Result"]] = relationship(
		back_populates="search", cascade="all, delete-orphan"
	)


class Result(Base):
	__tablename__ = "results"

	search_id: Mapped[int] = mapped_column(ForeignKey("searches.id"), primary_key=True)
	publication_id: Mapped[int] = mapped_column(ForeignKey("publications.id"), primary_key=True)

	search: Mapped[Search] = relationship(back_populates="results")
	publication: Mapped[Publication] = relationship(back_populates="results")
