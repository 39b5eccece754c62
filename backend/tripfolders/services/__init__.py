# Services package init
"""
TripFolders Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database (persistence).
Why:   Routes handle HTTP; services handle the rules about folders and members.
How:   Services take the request's AsyncSession and domain objects and return
       domain objects. Nothing here commits; get_db_session does that.

Service Inventory:
    - membership:      Pure membership/visibility rules; the only writer of
                       a folder's member list and shared flag
    - FolderStore / FileStore: Loading and saving folders and files
    - UserDirectory:   Identity tokens, user lookup, add-member candidates
    - ImageService:    Decoding and checking encoded cover images
    - FolderService:   One method per operation the routes expose
"""
