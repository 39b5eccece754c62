# Routes package init
"""
TripFolders Backend — Web Routes Package
=========================================

What:  HTTP route handlers that render pages and accept form submissions.
Why:   Routes are the entry point for everything the browser does.
How:   Each route module handles one area of the site.

Route Inventory:
    - home.py:     GET  /                               (entry page)
    - folders.py:  GET  /tripFolders                    (landing page)
                   GET  /tripFolders/private|shared     (listings, ?folderName=)
                   GET  /tripFolders/create             (new folder form)
                   POST /tripFolders/create             (create folder)
                   GET  /tripFolders/{id}               (folder page)
                   PUT  /tripFolders/{id}               (rename / redate)
                   DELETE /tripFolders/{id}             (delete folder)
                   GET  /tripFolders/{id}/editFolder    (edit form)
                   GET  /tripFolders/{id}/addUser       (candidates, ?username=)
                   PUT  /tripFolders/{id}/addUser       (add member)
                   PUT  /tripFolders/{id}/removeUser    (leave folder)
                   GET  /tripFolders/{id}/addFile       (add file form)
                   POST /tripFolders/{id}/addFile       (create + attach file)
    - health.py:   GET  /health                         (service health check)
    - deps.py:     current-user dependency, render() and redirect_to()

Design Principle:
    Routes are THIN: read the form or query, call one FolderService method,
    then render or redirect. Every failure the user can cause ends as a 303
    redirect carrying `?errorMessage=`.
"""
