from mongo_paginate.fields.base import PyObjectId

__all__ = ["PyObjectId"]
