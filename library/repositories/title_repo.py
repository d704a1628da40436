from library.models.title import Title


class TitleRepo:
    def __init__(self, session):
        self.session = session

    def get(self, title_id: str):
        return self.session.get(Title, title_id)

    def add(self, title: Title):
        self.session.add(title)
        self.session.flush()
        return title
