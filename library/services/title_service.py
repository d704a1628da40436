from library.models.title import Title
from library.repositories.title_repo import TitleRepo
from library.repositories.volume_repo import VolumeRepo
from library.services.errors import TitleNotFound
from library.services.transaction import transaction
from library.utils.validation import json_object, optional_str, required_str


class TitleService:
    def __init__(self, session):
        self.session = session
        self.titles = TitleRepo(session)
        self.volumes = VolumeRepo(session)

    def get_title(self, title_id: str):
        title = self.titles.get(title_id)
        if not title:
            raise TitleNotFound()
        return title

    def create_title(self, data: dict):
        data = json_object(data)
        name = required_str(data, "title")
        subtitle = optional_str(data, "subtitle")
        isbn = optional_str(data, "isbn")
        with transaction(self.session, "create title", "titles"):
            title = self.titles.add(Title(
                title=name,
                subtitle=subtitle,
                isbn=isbn,
            ))
        return title

    def list_volumes(self, title_id: str):
        self.get_title(title_id)
        return self.volumes.list_by_title(title_id)
