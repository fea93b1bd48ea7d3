"""
HTML front page for Posts Service.
"""

from html import escape
from string import Template

_INDEX_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$node_name</title>
    <style>
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
               max-width: 800px; margin: 0 auto; padding: 20px; background-color: #f5f5f5; }
        .container { background: white; border-radius: 12px; padding: 30px;
                     box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        h1 { color: #333; text-align: center; margin-bottom: 30px; }
        .info { background: #e3f2fd; border: 1px solid #2196f3; border-radius: 8px;
                padding: 15px; margin-bottom: 20px; }
        .post-form { background: #f8f9fa; padding: 20px; border-radius: 8px; margin-bottom: 30px; }
        .form-group { margin-bottom: 15px; }
        label { display: block; margin-bottom: 5px; font-weight: 600; color: #555; }
        input, textarea { width: 100%; padding: 12px; border: 1px solid #ddd; border-radius: 6px;
                          font-size: 16px; box-sizing: border-box; }
        textarea { resize: vertical; min-height: 100px; }
        button { background: #007bff; color: white; border: none; padding: 12px 24px;
                 border-radius: 6px; font-size: 16px; cursor: pointer; }
        button:hover { background: #0056b3; }
        .refresh-btn { background: #28a745; margin-left: 10px; }
        .post { border: 1px solid #e9ecef; border-radius: 8px; padding: 20px; margin-bottom: 15px; }
        .post-header { display: flex; justify-content: space-between; margin-bottom: 10px; }
        .username { font-weight: 600; color: #007bff; }
        .timestamp { color: #6c757d; font-size: 14px; }
        .content { color: #333; line-height: 1.6; white-space: pre-wrap; }
    </style>
</head>
<body>
    <div class="container">
        <h1>$node_name</h1>

        <div class="info">
            <p>$node_description</p>
            <p><strong>Server URL:</strong> <a href="$base_url" target="_blank">$base_url</a></p>
        </div>

        <div class="post-form">
            <h3>Create a Post</h3>
            <form id="postForm">
                <div class="form-group">
                    <label for="username">Username:</label>
                    <input type="text" id="username" name="username" required placeholder="Enter your username">
                </div>
                <div class="form-group">
                    <label for="content">Post Content:</label>
                    <textarea id="content" name="content" required placeholder="What's on your mind?"></textarea>
                </div>
                <button type="submit">Post</button>
            </form>
        </div>

        <div class="posts">
            <h3>Recent Posts</h3>
            <button onclick="loadPosts()" class="refresh-btn">Refresh Posts</button>
            <div id="postsList"></div>
        </div>
    </div>

    <script>
        loadPosts();

        document.getElementById('postForm').addEventListener('submit', async (e) => {
            e.preventDefault();
            const username = document.getElementById('username').value;
            const content = document.getElementById('content').value;

            try {
                const response = await fetch('/api/posts', {
                    method: 'POST',
                    headers: { 'Content-Type': 'application/json' },
                    body: JSON.stringify({ username, content }),
                });
                if (response.ok) {
                    document.getElementById('content').value = '';
                    loadPosts();
                } else {
                    const error = await response.json();
                    alert('Error: ' + error.message);
                }
            } catch (error) {
                alert('Error creating post: ' + error.message);
            }
        });

        async function loadPosts() {
            const postsList = document.getElementById('postsList');
            try {
                const response = await fetch('/api/posts');
                const posts = await response.json();
                postsList.replaceChildren();

                if (posts.length === 0) {
                    postsList.textContent = 'No posts yet. Be the first to post!';
                    return;
                }

                for (const post of posts) {
                    const element = document.createElement('div');
                    element.className = 'post';

                    const header = document.createElement('div');
                    header.className = 'post-header';
                    const user = document.createElement('span');
                    user.className = 'username';
                    user.textContent = '@' + post.username;
                    const stamp = document.createElement('span');
                    stamp.className = 'timestamp';
                    stamp.textContent = new Date(post.createdAt).toLocaleString();
                    header.append(user, stamp);

                    const body = document.createElement('div');
                    body.className = 'content';
                    body.textContent = post.content;

                    element.append(header, body);
                    postsList.appendChild(element);
                }
            } catch (error) {
                console.error('Error loading posts:', error);
                postsList.textContent = 'Error loading posts.';
            }
        }
    </script>
</body>
</html>
""")


def render_index(base_url: str, node_name: str, node_description: str) -> str:
    """Front page with the post form and the recent posts list."""
    return _INDEX_TEMPLATE.substitute(
        base_url=escape(base_url, quote=True),
        node_name=escape(node_name),
        node_description=escape(node_description),
    )
