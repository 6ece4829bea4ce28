class BaseAnonymiser:
    """
    Takes frame + faces list -> returns anonymised frame.
    The input frame is left untouched.
    """
    def apply(self, frame, faces):
        raise NotImplementedError
